"""
Shared configuration management for the integrity enforcer.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

IN_CLUSTER_TOKEN_FILE = "/var/run/secrets/kubernetes.io/serviceaccount/token"


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="ENFORCER_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class EnforcerConfig(BaseConfig):
    """Enforcer-specific configuration."""

    service_name: str = Field(default="enforcer")

    # Kubernetes API, used to resolve service accounts
    kube_api_url: str = Field(default="https://kubernetes.default.svc")
    kube_token_file: Optional[str] = Field(default=IN_CLUSTER_TOKEN_FILE)
    kube_ca_file: Optional[str] = Field(default=None)
    kube_verify_tls: bool = Field(default=True)
    identity_lookup_timeout: float = Field(default=5.0)


def get_config(**overrides) -> EnforcerConfig:
    """Get enforcer configuration, environment first then overrides."""
    return EnforcerConfig(**overrides)
