"""Rule table turning an assessment and vitals trends into care recommendations.

Rules are evaluated independently; any number may apply.
"""

from __future__ import annotations

from collections.abc import Sequence

from riskwatch.domains.health.domain_logic.models import (
    CareRecommendation,
    RiskAssessment,
    VitalsTrend,
)
from riskwatch.domains.health.domain_logic.predictions import mentions

ACTIVITY_KEYWORDS = ("sedentary", "activity")


def generate_care_recommendations(
    assessment: RiskAssessment,
    vitals_trends: Sequence[VitalsTrend],
) -> list[CareRecommendation]:
    recommendations: list[CareRecommendation] = []

    if assessment.risk_level == "CRITICAL":
        recommendations.append(CareRecommendation(
            category="INTERVENTION",
            priority="URGENT",
            recommendation="Immediate clinical assessment and intervention required",
            reasoning="Critical risk level detected with multiple concerning factors",
            estimated_impact="Potentially life-saving",
            timeline="Within 24 hours",
        ))

    bp_trend = next((t for t in vitals_trends if t.metric == "bp_systolic"), None)
    if bp_trend is not None and bp_trend.is_abnormal:
        severe = bp_trend.current > 180
        recommendations.append(CareRecommendation(
            category="MEDICATION",
            priority="URGENT" if severe else "HIGH",
            recommendation="Review and adjust antihypertensive medications",
            reasoning=(
                f"Blood pressure {bp_trend.trend.lower()} with current reading "
                f"of {bp_trend.current:g}"
            ),
            estimated_impact="Reduced cardiovascular risk",
            timeline="Within 48 hours" if severe else "Within 1 week",
        ))

    if mentions(assessment.risk_factors, ACTIVITY_KEYWORDS):
        recommendations.append(CareRecommendation(
            category="LIFESTYLE",
            priority="MEDIUM",
            recommendation="Implement structured physical activity program",
            reasoning="Low activity levels contributing to overall risk",
            estimated_impact="Improved cardiovascular health and overall well-being",
            timeline="Start within 2 weeks",
        ))

    if assessment.risk_level == "HIGH":
        recommendations.append(CareRecommendation(
            category="MONITORING",
            priority="HIGH",
            recommendation="Increase monitoring frequency to daily check-ins",
            reasoning="High risk status requires closer observation",
            estimated_impact="Early detection of health changes",
            timeline="Implement immediately",
        ))

    return recommendations
