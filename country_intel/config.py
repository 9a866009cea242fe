import os
import sys
from functools import lru_cache
from typing import List

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    environment: str = Field(default="development", alias="NODE_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Upstream data source
    restcountries_base_url: str = Field(
        default="https://restcountries.com/v3.1",
        alias="RESTCOUNTRIES_BASE_URL",
    )
    upstream_timeout: float = Field(default=30.0, alias="UPSTREAM_TIMEOUT")
    upstream_max_connections: int = Field(default=100, alias="UPSTREAM_MAX_CONNECTIONS")
    upstream_max_keepalive: int = Field(default=50, alias="UPSTREAM_MAX_KEEPALIVE")

    # Service identity (published on the discovery manifest)
    agent_name: str = Field(default="country-intel", alias="AGENT_NAME")
    agent_url: str = Field(
        default="https://country-intel-production.up.railway.app",
        alias="AGENT_URL",
    )
    allowed_origins: List[str] = Field(default_factory=lambda: [], alias="ALLOWED_ORIGINS")
    disable_mcp: bool = Field(default=False, alias="DISABLE_MCP")

    # Per-call payment gate. Verification and settlement are done by the facilitator.
    payments_enabled: bool = Field(default=False, alias="PAYMENTS_ENABLED")
    payments_receivable_address: str | None = Field(default=None, alias="PAYMENTS_RECEIVABLE_ADDRESS")
    payments_network: str = Field(default="base", alias="PAYMENTS_NETWORK")
    payments_facilitator_url: str = Field(
        default="https://facilitator.x402.org",
        alias="PAYMENTS_FACILITATOR_URL",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,  # Treat empty strings as not set
    )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_origins(cls, v):
        """Parse ALLOWED_ORIGINS from comma-separated string or list"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v or []

    @model_validator(mode="after")
    def validate_payment_settings(self):
        """A receivable address is required once the payment gate is switched on."""
        if self.payments_enabled and not self.payments_receivable_address:
            raise ValueError(
                "PAYMENTS_RECEIVABLE_ADDRESS is required when PAYMENTS_ENABLED is true."
            )
        return self

    @property
    def dev_mode(self) -> bool:
        """Check if running in development/test mode."""
        in_test = "pytest" in sys.modules or os.getenv("TEST") == "true"
        in_dev = self.environment == "development"
        return in_test or in_dev


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process; invalid environment is a ConfigurationError."""
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e.error_count()} error(s)",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e
