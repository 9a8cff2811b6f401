"""MCP tools for single-patient analytics.

Each tool fetches the patient's raw bundle from the data provider, runs it
through the HealthAnalyticsEngine and returns a JSON document.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastmcp import FastMCP

if TYPE_CHECKING:
    from riskwatch.domains.health.connectors import PatientDataProvider
    from riskwatch.domains.health.domain_logic.engine import HealthAnalyticsEngine

logger = logging.getLogger(__name__)


def _unknown_patient(patient_id: str) -> str:
    return json.dumps({
        "status": "error",
        "error": "unknown_patient",
        "message": f"No patient record found for {patient_id!r}",
    })


def register_patient_analytics_tools(
    mcp: FastMCP,
    engine: HealthAnalyticsEngine,
    provider: PatientDataProvider,
) -> None:
    """Register per-patient risk, alert and statistics tools on the MCP server."""

    async def _fetch(patient_id: str) -> dict[str, Any] | None:
        bundle = await provider.get_patient_bundle(patient_id)
        if bundle is None:
            logger.info("Patient %s not found in %s provider", patient_id, provider.data_source)
        return bundle

    @mcp.tool
    async def patient_insights(patient_id: str) -> str:
        """Full analytics for one patient.

        Returns the risk assessment, vitals trends, adherence score, alerts,
        predicted outcomes and care recommendations, plus a clinician summary,
        the recommended actions and the next review date.

        Args:
            patient_id: Patient identifier known to the data provider.
        """
        bundle = await _fetch(patient_id)
        if bundle is None:
            return _unknown_patient(patient_id)

        insight = engine.generate_patient_insights(patient_id, bundle)
        return json.dumps({
            "status": "ok",
            "data_source": provider.data_source,
            "insight": insight.as_dict(),
            "clinical_summary": engine.generate_clinical_summary(insight),
            "recommended_actions": engine.generate_recommended_actions(insight),
            "next_review_date": engine.calculate_next_review_date(insight),
        }, indent=2)

    @mcp.tool
    async def patient_alerts(patient_id: str) -> str:
        """Current emergency alerts for one patient (critical vitals, missed check-ins, emergency flag).

        Args:
            patient_id: Patient identifier known to the data provider.
        """
        bundle = await _fetch(patient_id)
        if bundle is None:
            return _unknown_patient(patient_id)

        alerts = engine.monitor_patient_in_real_time(bundle)
        return json.dumps({
            "status": "ok",
            "patient_id": patient_id,
            "alert_count": len(alerts),
            "alerts": [a.as_dict() for a in alerts],
            "emergency_contact_required": [
                a.id for a in engine.alerts_needing_emergency_contact(alerts)
            ],
        }, indent=2)

    @mcp.tool
    async def patient_health_statistics(patient_id: str) -> str:
        """Daily logs, weekly summaries and overall statistics for one patient's readings.

        Args:
            patient_id: Patient identifier known to the data provider.
        """
        bundle = await _fetch(patient_id)
        if bundle is None:
            return _unknown_patient(patient_id)

        stats = engine.compute_health_statistics(bundle.get("vitals") or [])
        return json.dumps({
            "status": "ok",
            "patient_id": patient_id,
            "statistics": stats.as_dict(),
        }, indent=2)
