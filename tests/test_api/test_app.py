"""Tests for application wiring: lifespan, logging and error handlers."""

import logging
from unittest.mock import patch

from fastapi.testclient import TestClient

from conftest import FakeGateway, RecordingSink
from voyager.api.main import configure_logging, create_app
from voyager.session import ChatSession
from voyager.tracing import get_tracing_client


class TestLifespan:
    """Tests for the startup/shutdown lifespan."""

    def test_lifespan_initializes_tracing_and_closes_gateway(self, registry):
        gateway = FakeGateway()
        session = ChatSession(registry=registry, gateway=gateway, sink=RecordingSink())

        with TestClient(create_app(session)) as client:
            assert client.get("/api/tools").status_code == 200
            assert get_tracing_client() is not None

        assert gateway.closed is True
        assert get_tracing_client() is None

    def test_lifespan_builds_session_from_config(self, registry):
        session = ChatSession(registry=registry, gateway=FakeGateway(), sink=RecordingSink())

        with patch("voyager.api.main.ChatSession.from_config", return_value=session) as from_config:
            app = create_app()
            with TestClient(app):
                assert app.state.session is session

        from_config.assert_called_once()


class TestLogging:
    def test_configure_logging_sets_package_level(self):
        configure_logging()
        assert logging.getLogger("voyager").level != logging.NOTSET


class TestOpenAPI:
    def test_routes_registered(self, registry):
        paths = create_app(ChatSession(registry=registry, gateway=FakeGateway())).openapi()["paths"]

        for path in (
            "/api/health",
            "/api/mcp/init",
            "/api/mcp/handshake",
            "/api/tools",
            "/api/tools/stats",
            "/api/chat",
            "/api/stats",
            "/api/session/reset",
        ):
            assert path in paths
