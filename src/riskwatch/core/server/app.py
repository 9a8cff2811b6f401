"""riskwatch MCP server — application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from riskwatch.core.config.loader import load_configuration_file
from riskwatch.core.config.settings import get_settings
from riskwatch.domains.health.connectors import PatientDataProvider
from riskwatch.domains.health.connectors.providers import MockPatientDataProvider
from riskwatch.domains.health.domain_logic.engine import HealthAnalyticsEngine
from riskwatch.domains.health.tools.patient_analytics_tools import (
    register_patient_analytics_tools,
)
from riskwatch.domains.health.tools.population_tools import register_population_tools

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(
    *,
    provider_override: PatientDataProvider | None = None,
    engine_override: HealthAnalyticsEngine | None = None,
) -> FastMCP:
    """Create and configure the riskwatch MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Builds the analytics engine (with YAML threshold overrides if configured)
    3. Initializes the patient data provider (mock unless overridden)
    4. Registers all tools
    """
    settings = get_settings()

    # --- Server instance ---
    server = FastMCP(
        "riskwatch",
        instructions=(
            "Remote patient monitoring analytics. Provides risk assessment, "
            "vitals trends, emergency alerts, health statistics and "
            "population insights computed from patient vitals and check-ins."
        ),
    )

    # --- Analytics engine ---
    if engine_override is not None:
        engine = engine_override
    elif settings.analytics_config_path:
        engine = HealthAnalyticsEngine(load_configuration_file(settings.analytics_config_path))
    else:
        engine = HealthAnalyticsEngine()
        logger.info("Using default analytics configuration")

    # --- Patient data provider ---
    if provider_override is not None:
        provider = provider_override
    else:
        provider = MockPatientDataProvider(settings.mock_cohort_size)
        logger.info("Using mock patient data provider (%d patients)", settings.mock_cohort_size)

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": "riskwatch",
            "version": VERSION,
            "data_source": provider.data_source,
            "analytics_config_path": settings.analytics_config_path or None,
        }

    register_patient_analytics_tools(server, engine, provider)
    logger.info("Patient analytics tools registered")

    register_population_tools(server, engine, provider)
    logger.info("Population analytics tools registered")

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
