"""Configuration management using Pydantic Settings.

This module handles loading configuration from environment variables
(prefix ``HOSTSTAT_``) or a ``.env`` file and provides type-safe
configuration objects. CLI flags override these values.
"""

from typing import Optional
import httpx
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hoststat.core.constants import DEFAULT_DB_PATH, DEFAULT_FREQ_MINUTES, SECONDS_PER_MINUTE
from hoststat.core.exceptions import StartupError


class ReportingConfig(BaseModel):
    """Remote collector configuration."""

    model_config = {"frozen": True}

    url: str = Field(..., description="Endpoint snapshots are POSTed to")
    token: str = Field(..., description="Bearer token")
    verify_tls: bool = Field(False, description="Verify the server certificate")
    timeout_seconds: Optional[float] = Field(None, description="Request timeout (None = no timeout)")


class StoreConfig(BaseModel):
    """Local store configuration."""

    model_config = {"frozen": True}

    db_path: str = Field(DEFAULT_DB_PATH, description="SQLite database file")


class AgentSettings(BaseSettings):
    """Main agent settings."""

    model_config = SettingsConfigDict(
        env_prefix="HOSTSTAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Reporting
    url: str = Field("", description="URL to send reports to")
    token: str = Field("", description="Authentication token")
    verify_tls: bool = Field(False, description="Verify the collector's TLS certificate")
    request_timeout_seconds: Optional[float] = Field(None, description="HTTP request timeout in seconds")

    # Scheduling
    freq_minutes: int = Field(DEFAULT_FREQ_MINUTES, description="Reporting frequency in minutes")

    # Local store
    db_path: str = Field(DEFAULT_DB_PATH, description="SQLite database path")

    # Logging
    log_level: str = Field("INFO", description="Logging level")
    log_file: Optional[str] = Field(None, description="Log file path")

    @field_validator("freq_minutes")
    @classmethod
    def check_freq(cls, v: int) -> int:
        """Frequency is a whole number of minutes, at least one."""
        if v < 1:
            raise ValueError("freq_minutes must be at least 1")
        return v

    @field_validator("request_timeout_seconds")
    @classmethod
    def check_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return v

    @property
    def interval_seconds(self) -> float:
        """Sleep between cycles in seconds."""
        return float(self.freq_minutes * SECONDS_PER_MINUTE)

    @property
    def reporting(self) -> ReportingConfig:
        """Get reporting configuration.

        Raises:
            StartupError: If the URL or token is missing or malformed
        """
        if not self.url or not self.token:
            raise StartupError("Reporting URL and authentication token are required")
        try:
            url = httpx.URL(self.url)
        except httpx.InvalidURL as e:
            raise StartupError(f"Invalid reporting URL {self.url!r}: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise StartupError(f"Reporting URL must be an absolute http(s) URL: {self.url!r}")
        if not self.token.isascii():
            raise StartupError("Authentication token must be ASCII")
        return ReportingConfig(
            url=self.url,
            token=self.token,
            verify_tls=self.verify_tls,
            timeout_seconds=self.request_timeout_seconds,
        )

    @property
    def store(self) -> StoreConfig:
        """Get local store configuration."""
        return StoreConfig(db_path=self.db_path)

    @classmethod
    def from_env(cls, **overrides) -> "AgentSettings":
        """Load settings from environment variables.

        Args:
            overrides: Values taking precedence over the environment (None is ignored)
        """
        return cls(**{k: v for k, v in overrides.items() if v is not None})
