"""
Process-wide Langfuse client for chat traces (SDK v3).

Built once from the ``langfuse`` config section when the server starts.
Tracing stays off when credentials are missing or the startup auth check
fails; every call is then a no-op and chat processing is unaffected.
"""

import logging
from typing import Any, Optional, Sequence

from langfuse import Langfuse

from ..models.config import LangfuseConfig

logger = logging.getLogger(__name__)

# Tags attached to every chat trace.
DEFAULT_TAGS = ("voyager", "tool-calling")


class TracingClient:
    """Langfuse client owning the trace defaults for chat requests."""

    def __init__(
        self,
        settings: Optional[LangfuseConfig] = None,
        tags: Sequence[str] = DEFAULT_TAGS,
        verify: bool = True,
    ):
        """
        Args:
            settings: Langfuse section of the app config
            tags: Tags put on every trace started through this client
            verify: Run auth_check() once and disable tracing if it fails
        """
        self.settings = settings or LangfuseConfig()
        self.tags = list(tags)
        self._client: Optional[Langfuse] = None
        self._error: Optional[str] = None

        if not self.settings.is_configured:
            self._error = "Langfuse credentials not configured"
            logger.debug(f"Tracing disabled: {self._error}")
            return

        try:
            self._client = Langfuse(
                public_key=self.settings.public_key,
                secret_key=self.settings.secret_key,
                host=self.settings.host,
                flush_at=self.settings.flush_at,
                flush_interval=self.settings.flush_interval,
                debug=self.settings.debug,
            )
        except Exception as e:
            self._disable(f"Failed to initialize Langfuse client: {e}")
            return

        if verify:
            self._verify()
        if self._client is not None:
            logger.info(f"Langfuse tracing enabled (host: {self.settings.host})")

    def _disable(self, reason: str) -> None:
        self._error = reason
        self._client = None
        logger.warning(f"Tracing disabled: {reason}")

    def _verify(self) -> None:
        try:
            accepted = self._client.auth_check()
        except Exception as e:
            self._disable(f"Langfuse unreachable at {self.settings.host}: {e}")
            return
        if not accepted:
            self._disable(f"Langfuse rejected the configured keys (host: {self.settings.host})")

    @property
    def enabled(self) -> bool:
        return self._client is not None

    @property
    def error(self) -> Optional[str]:
        """Why tracing is disabled, if it is."""
        return self._error

    @property
    def client(self) -> Optional[Langfuse]:
        return self._client

    def describe(self) -> list[str]:
        """Status lines for the startup banner."""
        if self.enabled:
            return [
                "Status: ENABLED",
                f"Host: {self.settings.host}",
                f"Tags: {', '.join(self.tags)}",
            ]
        return ["Status: DISABLED", f"Reason: {self._error}"]

    def start_chat_span(
        self,
        name: str,
        session_id: Optional[str],
        input: Optional[Any] = None,
        metadata: Optional[dict] = None,
    ) -> tuple[Any, Any]:
        """
        Open the root span of a chat trace and tag the trace.

        Returns:
            (context manager, span). The caller exits the context manager
            when the request ends.
        """
        context_manager = self._client.start_as_current_observation(
            as_type="span",
            name=name,
            input=input,
            metadata=metadata,
        )
        span = context_manager.__enter__()
        span.update_trace(session_id=session_id, tags=self.tags)
        return context_manager, span

    def flush(self) -> None:
        if not self._client:
            return
        try:
            self._client.flush()
        except Exception as e:
            logger.warning(f"Failed to flush tracing events: {e}")

    def shutdown(self) -> None:
        """Flush remaining events and stop the background exporter."""
        if not self._client:
            return
        try:
            self._client.shutdown()
            logger.info("Langfuse tracing client shutdown complete")
        except Exception as e:
            logger.warning(f"Error during tracing client shutdown: {e}")


_tracing_client: Optional[TracingClient] = None


def init_tracing_client(
    settings: Optional[LangfuseConfig] = None,
    verify: bool = True,
) -> TracingClient:
    """Create the process-wide tracing client."""
    global _tracing_client
    _tracing_client = TracingClient(settings=settings, verify=verify)
    return _tracing_client


def get_tracing_client() -> Optional[TracingClient]:
    return _tracing_client


def shutdown_tracing() -> None:
    global _tracing_client
    if _tracing_client:
        _tracing_client.shutdown()
        _tracing_client = None
