"""
Configuration models for Voyager.

Defines dataclasses for the unified YAML configuration file.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class OllamaConfig:
    """Configuration for the Ollama model backend."""
    base_url: str = "http://localhost:11434"
    model: str = "qwen3:8b"
    # Seconds; 0 disables the timeout entirely.
    request_timeout: float = 0.0

    @property
    def timeout(self) -> Optional[float]:
        """Timeout in the form httpx expects (None means wait forever)."""
        return self.request_timeout if self.request_timeout > 0 else None


@dataclass
class OrchestratorConfig:
    """Configuration for the orchestration loop."""
    max_iterations: int = 8
    system_prompt: str = ""


@dataclass
class ToolsConfig:
    """Configuration for the travel tool set."""
    validate_arguments: bool = True
    min_latency_ms: int = 400
    max_latency_ms: int = 1000


@dataclass
class ServerConfig:
    """Configuration for the FastAPI server."""
    host: str = "localhost"
    port: int = 3001
    workers: int = 1
    reload: bool = False


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse observability.

    Tracing auto-enables when both public_key and secret_key are provided.
    """
    public_key: str = ""
    secret_key: str = ""
    host: str = "https://cloud.langfuse.com"
    flush_at: int = 10
    flush_interval: float = 1.0
    debug: bool = False

    @property
    def is_configured(self) -> bool:
        """Check if Langfuse is configured (both keys present)."""
        return bool(self.public_key and self.secret_key)


@dataclass
class AppConfig:
    """
    Unified application configuration container.

    Holds all configuration sections loaded from config/config.yaml.
    """
    version: str = "1.0"
    ollama: OllamaConfig = field(default_factory=OllamaConfig)
    orchestrator: OrchestratorConfig = field(default_factory=OrchestratorConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)

    @property
    def log_level(self) -> str:
        """Shortcut for logging.level."""
        return self.logging.level
