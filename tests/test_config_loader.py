"""
Tests for configuration loading.

Tests cover env var interpolation, section parsing, defaults and caching.
"""

import pytest

from voyager.config_loader import (
    load_app_config,
    parse_app_config,
    reset_config_cache,
    resolve_env_vars,
)
from voyager.models import AppConfig


@pytest.fixture(autouse=True)
def fresh_cache():
    """Each test starts and ends with an empty config cache."""
    reset_config_cache()
    yield
    reset_config_cache()


class TestResolveEnvVars:
    """Tests for ${VAR} and ${VAR:-default} interpolation."""

    def test_set_variable(self, monkeypatch):
        monkeypatch.setenv("OLLAMA_URL", "http://gpu-box:11434")
        assert resolve_env_vars("${OLLAMA_URL:-http://localhost:11434}") == "http://gpu-box:11434"

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("OLLAMA_MODEL", raising=False)
        assert resolve_env_vars("${OLLAMA_MODEL:-qwen3:8b}") == "qwen3:8b"

    def test_unset_without_default_is_empty(self, monkeypatch):
        monkeypatch.delenv("LANGFUSE_SECRET_KEY", raising=False)
        assert resolve_env_vars("key=${LANGFUSE_SECRET_KEY}") == "key="


class TestParseAppConfig:
    """Tests for parse_app_config()."""

    def test_defaults(self):
        config = parse_app_config({})

        assert config.ollama.base_url == "http://localhost:11434"
        assert config.ollama.model == "qwen3:8b"
        assert config.ollama.timeout is None
        assert config.orchestrator.max_iterations == 8
        assert config.tools.validate_arguments is True
        assert config.server.port == 3001
        assert config.log_level == "INFO"
        assert config.langfuse.is_configured is False

    def test_string_values_after_substitution(self, monkeypatch):
        """Env-substituted strings are converted to the field types."""
        monkeypatch.setenv("MAX_ITERATIONS", "4")
        monkeypatch.setenv("OLLAMA_TIMEOUT", "90")
        config = parse_app_config(
            {
                "ollama": {"request_timeout": "${OLLAMA_TIMEOUT:-0}", "base_url": "http://x:1/"},
                "orchestrator": {"max_iterations": "${MAX_ITERATIONS:-8}"},
                "tools": {"validate_arguments": "false"},
                "server": {"reload": "true"},
            }
        )

        assert config.orchestrator.max_iterations == 4
        assert config.ollama.timeout == 90.0
        assert config.ollama.base_url == "http://x:1"
        assert config.tools.validate_arguments is False
        assert config.server.reload is True

    def test_invalid_section_names_section(self):
        with pytest.raises(ValueError, match="Invalid 'orchestrator' configuration"):
            parse_app_config({"orchestrator": {"max_iterations": 0}})

    def test_invalid_latency_range(self):
        with pytest.raises(ValueError, match="Invalid 'tools' configuration"):
            parse_app_config({"tools": {"min_latency_ms": 500, "max_latency_ms": 100}})

    def test_langfuse_configured(self):
        config = parse_app_config({"langfuse": {"public_key": "pk-lf-1", "secret_key": "sk-lf-1"}})
        assert config.langfuse.is_configured is True


class TestLoadAppConfig:
    """Tests for load_app_config()."""

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("version: '2.0'\nollama:\n  model: llama3.1:8b\n")

        config = load_app_config(str(path))

        assert config.version == "2.0"
        assert config.ollama.model == "llama3.1:8b"

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_app_config(str(tmp_path / "nope.yaml"))
        assert config == AppConfig()

    def test_empty_file_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        with pytest.raises(ValueError, match="empty"):
            load_app_config(str(path))

    def test_cached_until_reload(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("ollama:\n  model: first\n")
        first = load_app_config(str(path))

        path.write_text("ollama:\n  model: second\n")

        assert load_app_config(str(path)) is first
        assert load_app_config(str(path), reload=True).ollama.model == "second"

    def test_config_path_env(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("server:\n  port: 8080\n")
        monkeypatch.setenv("CONFIG_PATH", str(path))

        assert load_app_config().server.port == 8080

    def test_shipped_config_parses(self, monkeypatch):
        """The repository's config/config.yaml loads with a clean environment."""
        for var in ("OLLAMA_URL", "OLLAMA_MODEL", "OLLAMA_TIMEOUT", "MAX_ITERATIONS", "PORT", "CONFIG_PATH"):
            monkeypatch.delenv(var, raising=False)

        config = load_app_config()

        assert config.ollama.model == "qwen3:8b"
        assert config.orchestrator.max_iterations == 8
        assert config.tools.min_latency_ms == 400
