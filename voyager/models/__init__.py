"""
Configuration models for Voyager.
"""

from .config import (
    OllamaConfig,
    OrchestratorConfig,
    ToolsConfig,
    ServerConfig,
    LoggingConfig,
    LangfuseConfig,
    AppConfig,
)

__all__ = [
    "OllamaConfig",
    "OrchestratorConfig",
    "ToolsConfig",
    "ServerConfig",
    "LoggingConfig",
    "LangfuseConfig",
    "AppConfig",
]
