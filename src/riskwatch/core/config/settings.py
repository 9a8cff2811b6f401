"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """riskwatch server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Default to loopback: patient analytics must not be exposed to the LAN/WAN
    # by accident. Opt into `0.0.0.0` explicitly when you intend remote access.
    riskwatch_host: str = "127.0.0.1"
    riskwatch_port: int = 8011
    riskwatch_log_level: str = "info"
    # If binding to non-loopback, refuse to start unless this is set true
    # (there is no auth layer in front of the tools).
    riskwatch_allow_insecure_bind: bool = False

    # Analytics thresholds (YAML file merged over the built-in defaults)
    analytics_config_path: str = ""

    # Mock cohort served when no real patient data provider is wired in
    mock_cohort_size: int = 12


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
