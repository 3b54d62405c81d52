"""
Configuration settings using pydantic-settings.

Every setting can be supplied through a ZSH_AI_SUGGESTIONS_* environment
variable (the zsh plugin exports them before spawning the daemon) or a
.env file in the working directory.
"""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

ENV_PREFIX = "ZSH_AI_SUGGESTIONS_"
DEFAULT_TMPDIR = Path("/tmp/zsh-ai-suggestions")


class Provider(str, Enum):
    """Closed set of suggestion backends."""

    OPENAI = "openai"
    OLLAMA = "ollama"
    GEMINI = "gemini"
    LLM = "llm"


class Settings(BaseSettings):
    """zsh-ai-suggestions configuration.

    Configuration is loaded from (in order of priority):
    1. Keyword arguments (tests, CLI overrides)
    2. Environment variables (ZSH_AI_SUGGESTIONS_*)
    3. .env file
    4. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Backend selection
    provider: Provider = Field(
        default=Provider.OPENAI,
        validation_alias=f"{ENV_PREFIX}TYPE",
        description="Suggestion backend: openai, ollama, gemini or llm",
    )

    # Shared directory
    tmpdir: Path = Field(
        default=DEFAULT_TMPDIR,
        description="Directory shared with the shell plugin",
    )
    cleanup_on_exit: bool = Field(
        default=True,
        description="Exit and purge the directory once no shell is left",
    )

    # Logging
    log_level: str = Field(
        default="info",
        description="error, warn, info, debug or off",
    )

    # Timing
    request_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Deadline for one suggestion in seconds",
    )
    settle_delay: float = Field(
        default=0.05,
        ge=0,
        description="Wait before reading a freshly written request file",
    )
    probe_interval: float = Field(
        default=10.0,
        gt=0,
        description="Seconds between shell liveness checks",
    )
    shell_name: str = Field(
        default="zsh",
        description="Process name counted by the liveness probe",
    )
    http_timeout: float = Field(
        default=10.0,
        gt=0,
        description="HTTP client timeout in seconds",
    )

    # HTTP front-end
    server_port: int = Field(
        default=5555,
        gt=0,
        lt=65536,
        # Bare SERVER_PORT is what earlier releases read
        validation_alias=AliasChoices(f"{ENV_PREFIX}SERVER_PORT", "SERVER_PORT"),
        description="Port for the HTTP front-end",
    )

    # Provider specific
    model: Optional[str] = Field(
        default=None,
        description="Model name for ollama, gemini and llm backends",
    )
    openai_api_key: Optional[str] = Field(default=None)
    openai_model: str = Field(default="gpt-4o-mini")
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    gemini_api_key: Optional[str] = Field(default=None)
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
    )
    ollama_url: str = Field(default="http://localhost:11434")


def _keyed_by_alias(overrides: dict) -> dict:
    """Key overrides by each field's primary alias.

    Environment values are stored under the alias and pydantic looks the
    alias up before the field name, so an override keyed by field name
    would lose to the environment.
    """
    keyed = {}
    for name, value in overrides.items():
        field = Settings.model_fields.get(name)
        alias = field.validation_alias if field is not None else None
        if isinstance(alias, AliasChoices):
            alias = alias.choices[0]
        keyed[alias if isinstance(alias, str) else name] = value
    return keyed


def load_settings(**overrides) -> Settings:
    """Build settings from the environment plus explicit overrides.

    Raises:
        ConfigError: If validation fails (e.g. unknown provider)
    """
    try:
        return Settings(**_keyed_by_alias(overrides))
    except ValidationError as e:
        raise ConfigError(f"invalid configuration: {e}") from e
