"""MCP tools for cohort analytics and analytics configuration."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastmcp import FastMCP

from riskwatch.domains.health.domain_logic.configuration import ConfigurationError

if TYPE_CHECKING:
    from riskwatch.domains.health.connectors import PatientDataProvider
    from riskwatch.domains.health.domain_logic.engine import HealthAnalyticsEngine

logger = logging.getLogger(__name__)


def register_population_tools(
    mcp: FastMCP,
    engine: HealthAnalyticsEngine,
    provider: PatientDataProvider,
) -> None:
    """Register population analytics and configuration tools on the MCP server."""

    @mcp.tool
    async def population_insights(intervention_limit: int = 10) -> str:
        """Cohort-wide analytics: risk distribution, trending concerns, conditions and predictions.

        Also returns the risk x adherence matrix and the highest-priority
        interventions across the cohort.

        Args:
            intervention_limit: Maximum number of intervention queue entries to return.
        """
        bundles = await provider.get_population()
        insights = engine.generate_population_insights(bundles)
        queue = engine.build_intervention_queue(bundles)
        return json.dumps({
            "status": "ok",
            "data_source": provider.data_source,
            "insights": insights.as_dict(),
            "risk_matrix": engine.build_risk_matrix(bundles).as_dict(),
            "intervention_queue": [item.as_dict() for item in queue[:max(intervention_limit, 0)]],
        }, indent=2)

    @mcp.tool
    def analytics_configuration() -> str:
        """Return the active analytics thresholds and settings."""
        return json.dumps(engine.get_configuration().model_dump(), indent=2)

    @mcp.tool
    def update_analytics_configuration(changes: dict[str, Any]) -> str:
        """Merge partial threshold overrides into the active configuration.

        Example: ``{"adherence_settings": {"missed_check_in_threshold": 5}}``.
        The previous configuration stays active if the changes are invalid.

        Args:
            changes: Nested mapping of configuration sections to override.
        """
        try:
            config = engine.update_configuration(changes)
        except ConfigurationError as exc:
            logger.warning("Rejected analytics configuration update: %s", exc)
            return json.dumps({"status": "error", "error": "invalid_configuration", "message": str(exc)})
        return json.dumps({"status": "ok", "configuration": config.model_dump()}, indent=2)
