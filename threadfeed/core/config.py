"""Configuration management using Pydantic Settings."""

from typing import ClassVar

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from threadfeed.shared.exceptions import ConfigError

# Singleton instance
_settings: "Settings | None" = None


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    The GitHub token is read here only so the CLI can hand it to a client;
    nothing in the library persists it.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # GitHub configuration
    github_token: str
    github_api_url: str = "https://api.github.com"

    # Page sizes
    page_size: int = 30
    timeline_page_size: int = 100

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    VALID_LOG_LEVELS: ClassVar[set[str]] = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    VALID_LOG_FORMATS: ClassVar[set[str]] = {"json", "console"}
    # GitHub rejects per_page above 100
    MAX_PAGE_SIZE: ClassVar[int] = 100

    @field_validator("github_token")
    @classmethod
    def validate_github_token(cls, v: str) -> str:
        """Reject blank tokens."""
        v = v.strip()
        if not v:
            raise ConfigError("GITHUB_TOKEN must not be empty")
        return v

    @field_validator("github_api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Require an http(s) base URL and drop any trailing slash."""
        if not v.startswith(("https://", "http://")):
            raise ConfigError(f"GitHub API URL must start with http:// or https://, got {v}")
        return v.rstrip("/")

    @field_validator("page_size", "timeline_page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        """Validate page sizes are within GitHub's accepted range (1-100)."""
        if not 1 <= v <= cls.MAX_PAGE_SIZE:
            raise ConfigError(f"Page size must be between 1 and {cls.MAX_PAGE_SIZE}, got {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        v_upper = v.upper()
        if v_upper not in cls.VALID_LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level: {v}. Must be one of {', '.join(sorted(cls.VALID_LOG_LEVELS))}"
            )
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format is json or console."""
        v_lower = v.lower()
        if v_lower not in cls.VALID_LOG_FORMATS:
            raise ConfigError(f"Invalid log format: {v}. Must be 'json' or 'console'")
        return v_lower


def get_settings() -> Settings:
    """Get or create the global Settings instance (cached singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()  # type: ignore[call-arg]
    return _settings
