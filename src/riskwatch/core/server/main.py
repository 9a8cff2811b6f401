"""Run the analytics MCP server: ``python -m riskwatch.core.server.main``."""

from __future__ import annotations

import logging
from ipaddress import ip_address

from riskwatch.core.config.settings import Settings, get_settings
from riskwatch.core.server.app import create_app

logger = logging.getLogger(__name__)


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def check_bind_address(settings: Settings) -> None:
    """Raise unless the server stays on loopback or remote access was opted into.

    The patient tools return identifiable vitals and have no auth in front.
    """
    if _is_loopback_host(settings.riskwatch_host):
        return
    if not settings.riskwatch_allow_insecure_bind:
        raise RuntimeError(
            f"riskwatch would expose patient analytics on non-loopback host "
            f"{settings.riskwatch_host!r} with no authentication. Bind to 127.0.0.1, "
            "or set RISKWATCH_ALLOW_INSECURE_BIND=true behind your own access control."
        )
    logger.warning(
        "Patient analytics exposed on %s without authentication (RISKWATCH_ALLOW_INSECURE_BIND=true)",
        settings.riskwatch_host,
    )


def run() -> None:
    """Serve the patient and population analytics tools over Streamable HTTP."""
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.riskwatch_log_level.upper(), logging.INFO))
    check_bind_address(settings)

    mcp = create_app()
    logger.info(
        "riskwatch analytics on http://%s:%d (thresholds: %s, mock cohort: %d patients)",
        settings.riskwatch_host,
        settings.riskwatch_port,
        settings.analytics_config_path or "built-in defaults",
        settings.mock_cohort_size,
    )
    mcp.run(
        transport="streamable-http",
        host=settings.riskwatch_host,
        port=settings.riskwatch_port,
    )


if __name__ == "__main__":
    run()
