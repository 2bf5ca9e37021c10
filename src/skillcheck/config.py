"""Configuration management for skillcheck."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging_utils import configure_logging


class Settings(BaseSettings):
    """Harness settings."""

    model_config = SettingsConfigDict(
        env_prefix="SKILLCHECK_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Request Configuration
    locale: str = Field(default="en-US", min_length=1, description="Locale used to build requests")
    version: str = Field(default="1.0", description="Protocol version stamped on requests")

    # Invocation Configuration
    invocation_timeout_seconds: float = Field(
        default=3.0, gt=0, description="Seconds a handler may take before the invocation is rejected"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_profile: Literal["default", "console"] = Field(default="default", description="Log output profile")


def get_settings(**overrides: object) -> Settings:
    """Get harness settings.

    Args:
        **overrides: Explicit values taking precedence over the environment

    Returns:
        Settings instance
    """
    settings = Settings(**overrides)

    configure_logging(profile=settings.log_profile, level=settings.log_level)

    return settings
