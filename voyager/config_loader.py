"""
Configuration loader for Voyager.

Loads configuration from YAML files with support for
environment variable interpolation.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from .models import (
    OllamaConfig,
    OrchestratorConfig,
    ToolsConfig,
    ServerConfig,
    LoggingConfig,
    LangfuseConfig,
    AppConfig,
)

logger = logging.getLogger(__name__)

# Default config path relative to project root
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "config.yaml"

# Regex for environment variable interpolation: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")

# Singleton cache for app config
_app_config: Optional[AppConfig] = None


def resolve_env_vars(value: str) -> str:
    """
    Resolve environment variable references in a string.

    Supports ${VAR} and ${VAR:-default} syntax.

    Args:
        value: String potentially containing env var references

    Returns:
        String with env vars resolved
    """

    def replace_match(match: re.Match) -> str:
        var_name = match.group(1)
        default_value = match.group(2) if match.group(2) is not None else ""
        return os.environ.get(var_name, default_value)

    return ENV_VAR_PATTERN.sub(replace_match, value)


def _substitute_env_vars_recursive(data: Any) -> Any:
    """Recursively substitute environment variables in a data structure."""
    if isinstance(data, dict):
        return {k: _substitute_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return resolve_env_vars(data)
    return data


def _parse_bool(value: Any) -> bool:
    """Parse a boolean that may arrive as a string after env substitution."""
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _parse_ollama_config(data: dict) -> OllamaConfig:
    """Parse Ollama backend configuration from dict."""
    return OllamaConfig(
        base_url=str(data.get("base_url", "http://localhost:11434")).rstrip("/"),
        model=data.get("model", "qwen3:8b"),
        request_timeout=float(data.get("request_timeout", 0) or 0),
    )


def _parse_orchestrator_config(data: dict) -> OrchestratorConfig:
    """Parse orchestrator configuration from dict."""
    max_iterations = int(data.get("max_iterations", 8))
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")
    return OrchestratorConfig(
        max_iterations=max_iterations,
        system_prompt=data.get("system_prompt", "") or "",
    )


def _parse_tools_config(data: dict) -> ToolsConfig:
    """Parse tools configuration from dict."""
    min_latency = int(data.get("min_latency_ms", 400))
    max_latency = int(data.get("max_latency_ms", 1000))
    if min_latency < 0 or max_latency < min_latency:
        raise ValueError(
            f"Invalid latency range: min_latency_ms={min_latency}, "
            f"max_latency_ms={max_latency}"
        )
    return ToolsConfig(
        validate_arguments=_parse_bool(data.get("validate_arguments", True)),
        min_latency_ms=min_latency,
        max_latency_ms=max_latency,
    )


def _parse_server_config(data: dict) -> ServerConfig:
    """Parse server configuration from dict."""
    return ServerConfig(
        host=data.get("host", "localhost"),
        port=int(data.get("port", 3001)),
        workers=int(data.get("workers", 1)),
        reload=_parse_bool(data.get("reload", False)),
    )


def _parse_logging_config(data: dict) -> LoggingConfig:
    """Parse logging configuration from dict."""
    return LoggingConfig(
        level=data.get("level", "INFO"),
    )


def _parse_langfuse_config(data: dict) -> LangfuseConfig:
    """Parse Langfuse configuration from dict."""
    return LangfuseConfig(
        public_key=data.get("public_key", ""),
        secret_key=data.get("secret_key", ""),
        host=data.get("host", "https://cloud.langfuse.com"),
        flush_at=int(data.get("flush_at", 10)),
        flush_interval=float(data.get("flush_interval", 1.0)),
        debug=_parse_bool(data.get("debug", False)),
    )


_SECTION_PARSERS = {
    "ollama": _parse_ollama_config,
    "orchestrator": _parse_orchestrator_config,
    "tools": _parse_tools_config,
    "server": _parse_server_config,
    "logging": _parse_logging_config,
    "langfuse": _parse_langfuse_config,
}


def parse_app_config(raw_config: dict) -> AppConfig:
    """
    Build an AppConfig from an already-loaded YAML mapping.

    Environment variables are substituted before parsing.

    Raises:
        ValueError: If a section holds an invalid value
    """
    raw_config = _substitute_env_vars_recursive(raw_config)

    sections: dict[str, Any] = {}
    for name, parser in _SECTION_PARSERS.items():
        section_data = raw_config.get(name) or {}
        try:
            sections[name] = parser(section_data)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid '{name}' configuration: {e}") from e

    return AppConfig(version=str(raw_config.get("version", "1.0")), **sections)


def load_app_config(path: Optional[str] = None, reload: bool = False) -> AppConfig:
    """
    Load unified application configuration from a YAML file.

    Uses a singleton pattern - subsequent calls return the cached config
    unless reload=True is specified.

    Args:
        path: Path to the YAML configuration file. If None, uses
              CONFIG_PATH env var or the default path (config/config.yaml).
        reload: If True, force reload from disk instead of using cache.

    Returns:
        AppConfig with all configuration loaded

    Raises:
        ValueError: If the config is empty or invalid
    """
    global _app_config

    if _app_config is not None and not reload:
        return _app_config

    if path is None:
        path = os.environ.get("CONFIG_PATH", str(DEFAULT_CONFIG_PATH))

    config_path = Path(path)

    if not config_path.exists():
        logger.warning(f"Configuration file not found at {config_path}, using defaults")
        _app_config = parse_app_config({})
        return _app_config

    logger.info(f"Loading configuration from {config_path}")

    with open(config_path, "r") as f:
        raw_config = yaml.safe_load(f)

    if raw_config is None:
        raise ValueError(f"Configuration file {config_path} is empty")

    app_config = parse_app_config(raw_config)
    _app_config = app_config

    logger.debug(
        f"Configuration loaded: version={app_config.version}, "
        f"model={app_config.ollama.model}, "
        f"max_iterations={app_config.orchestrator.max_iterations}"
    )

    return app_config


def reset_config_cache() -> None:
    """Reset the configuration cache, forcing a reload on next access."""
    global _app_config
    _app_config = None
    logger.debug("Configuration cache reset")
