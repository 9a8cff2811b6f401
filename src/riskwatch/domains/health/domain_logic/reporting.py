"""Clinician-facing summaries derived from patient insights."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

from riskwatch.domains.health.domain_logic.models import (
    CarePriority,
    InterventionItem,
    PatientInsight,
    RiskLevel,
)

REVIEW_INTERVAL_DAYS: dict[RiskLevel, int] = {
    "CRITICAL": 1,
    "HIGH": 7,
    "MODERATE": 14,
    "LOW": 30,
}

PRIORITY_RANK: dict[CarePriority, int] = {
    "URGENT": 5,
    "HIGH": 4,
    "MEDIUM": 3,
    "LOW": 2,
}

MAX_INTERVENTIONS = 50


def generate_clinical_summary(insight: PatientInsight) -> str:
    """Plain-text summary: scores, key findings and top three recommendations."""
    assessment = insight.risk_assessment
    lines = [
        f"Patient: {insight.patient_name}",
        f"Overall Health Score: {insight.overall_health_score}/100",
        f"Risk Level: {assessment.risk_level}",
        f"Adherence Score: {insight.adherence_score}%",
        "",
        "Key Findings:",
        *(f"• {factor}" for factor in assessment.risk_factors),
        "",
        "Recommendations:",
        *(f"• {rec.recommendation}" for rec in insight.care_recommendations[:3]),
        "",
        f"Last Assessment: {assessment.last_assessed[:10]}",
    ]
    return "\n".join(lines)


def generate_recommended_actions(insight: PatientInsight) -> list[str]:
    """Emergency actions first, then urgent care items, then general follow-ups."""
    actions: list[str] = []
    for alert in insight.emergency_alerts:
        if alert.action_required:
            actions.extend(alert.suggested_actions)

    actions.extend(
        rec.recommendation
        for rec in insight.care_recommendations
        if rec.priority in ("URGENT", "HIGH")
    )

    if insight.adherence_score < 70:
        actions.append("Implement adherence improvement strategies")
    if insight.overall_health_score < 60:
        actions.append("Schedule comprehensive health assessment")

    return list(dict.fromkeys(actions))


def calculate_next_review_date(insight: PatientInsight, now: datetime) -> str:
    days = REVIEW_INTERVAL_DAYS[insight.risk_assessment.risk_level]
    if any(alert.severity == "CRITICAL" for alert in insight.emergency_alerts):
        days = min(days, 1)
    return (now + timedelta(days=days)).isoformat()


def calculate_due_date(priority: CarePriority, timeline: str, now: datetime) -> str:
    timeline = timeline.lower()
    if priority == "URGENT" or "24 hours" in timeline:
        days = 1
    elif priority == "HIGH":
        days = 3
    elif "month" in timeline:
        days = 30
    else:
        days = 7
    return (now + timedelta(days=days)).isoformat()


def build_intervention_queue(
    insights: Sequence[PatientInsight],
    now: datetime,
    limit: int = MAX_INTERVENTIONS,
) -> list[InterventionItem]:
    """Care recommendations across a cohort, highest priority first."""
    queue = [
        InterventionItem(
            patient_id=insight.patient_id,
            patient_name=insight.patient_name,
            intervention_type=rec.category,
            priority=PRIORITY_RANK.get(rec.priority, 1),
            description=rec.recommendation,
            estimated_time_to_complete=rec.timeline,
            expected_outcome=rec.estimated_impact,
            due_date=calculate_due_date(rec.priority, rec.timeline, now),
        )
        for insight in insights
        for rec in insight.care_recommendations
    ]
    queue.sort(key=lambda item: -item.priority)
    return queue[:limit]
