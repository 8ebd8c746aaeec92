"""
config.py

PURPOSE: Settings for the engine, its language-model collaborators and tracing.
DEPENDENCIES: pydantic, pydantic-settings

ARCHITECTURE NOTES:
Configuration comes from multiple sources (in priority order):
1. CLI flags (highest priority)
2. Environment variables (FICTION_ENGINE_*, ANTHROPIC_API_KEY)
3. Defaults (lowest priority)

Engine caps (recent actions, conversation history) are NOT settings; they
live in fiction_engine.constants.
"""

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

from fiction_engine.constants import DEFAULT_COLLABORATOR_TIMEOUT


class LLMSettings(BaseSettings):
    """Settings for the intent parser, narrator and conversation responder."""

    provider: Literal["anthropic"] = Field(
        default="anthropic",
        description="LLM provider to use",
    )
    model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model name/ID",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    max_tokens: int = Field(
        default=1024,
        gt=0,
        description="Maximum tokens in response",
    )
    anthropic_api_key: str = Field(
        default="",
        description="Anthropic API key (or set ANTHROPIC_API_KEY env var)",
    )
    timeout_seconds: float = Field(
        default=DEFAULT_COLLABORATOR_TIMEOUT,
        gt=0,
        description="Per-call limit for collaborator requests before falling back",
    )

    model_config = {"env_prefix": "FICTION_ENGINE_LLM_"}


class OpenTelemetrySettings(BaseSettings):
    """Settings for opt-in tracing."""

    enabled: bool = Field(
        default=False,
        description="Emit spans for turns and LLM calls",
    )
    service_name: str = Field(
        default="fiction-engine",
        description="service.name resource attribute",
    )
    endpoint: str = Field(
        default="",
        description="OTLP gRPC endpoint; console export only when empty",
    )

    model_config = {"env_prefix": "FICTION_ENGINE_OTEL_"}


class Settings(BaseSettings):
    """Main application settings."""

    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".fiction-engine",
        description="Directory for saves and other data",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug output",
    )
    use_spatial: bool = Field(
        default=True,
        description="Use the spatial world model; False selects the flat legacy scan",
    )
    llm: LLMSettings = Field(
        default_factory=LLMSettings,
        description="LLM settings",
    )
    otel: OpenTelemetrySettings = Field(
        default_factory=OpenTelemetrySettings,
        description="Tracing settings",
    )

    model_config = {"env_prefix": "FICTION_ENGINE_"}

    def ensure_data_dir(self) -> Path:
        """Ensure data directory exists and return it."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return self.data_dir

    def saves_dir(self) -> Path:
        """Get the save-file directory, creating it if needed."""
        saves = self.data_dir / "saves"
        saves.mkdir(parents=True, exist_ok=True)
        return saves


def get_settings() -> Settings:
    """Get application settings, loading from environment."""
    # Fall back to the SDK's standard env var
    api_key = os.environ.get("FICTION_ENGINE_LLM_ANTHROPIC_API_KEY") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )

    llm_settings = LLMSettings(
        anthropic_api_key=api_key,
    )

    return Settings(llm=llm_settings)
