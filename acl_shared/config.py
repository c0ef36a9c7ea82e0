"""
Shared configuration management for the ACL decision engine.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AclSettings(BaseSettings):
    """Engine settings, read from ACL_* environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_prefix="ACL_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    service_name: str = Field(default="acl")

    # Observability
    log_level: str = Field(default="info")
    log_decisions: bool = Field(default=False)
    metrics_enabled: bool = Field(default=True)


def get_settings(**overrides) -> AclSettings:
    """Get engine settings, with explicit overrides taking precedence over the environment."""
    return AclSettings(**overrides)
