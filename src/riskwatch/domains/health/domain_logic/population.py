"""Cohort-level analytics over many patient bundles.

Per-patient assessments have no dependency on each other; they are computed
and combined in input order so distribution counts and concern rankings are
deterministic.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from datetime import date, datetime, timedelta

from riskwatch.domains.health.domain_logic.adherence import calculate_adherence_score
from riskwatch.domains.health.domain_logic.aggregation import round_half_up
from riskwatch.domains.health.domain_logic.configuration import AnalyticsConfiguration
from riskwatch.domains.health.domain_logic.models import (
    ConditionPrevalence,
    PatientBundle,
    PatientInsight,
    PopulationInsights,
    PopulationMetrics,
    PopulationPrediction,
    PopulationRecommendation,
    RiskAssessment,
    RiskMatrix,
    RiskMatrixCell,
)
from riskwatch.domains.health.domain_logic.predictions import mentions
from riskwatch.domains.health.domain_logic.readings import parse_timestamp
from riskwatch.domains.health.domain_logic.risk_assessment import assess_patient_risk

logger = logging.getLogger(__name__)

ACTIVE_WINDOW_DAYS = 30
TOP_CONCERNS = 5
HIGH_ADHERENCE = 70


def is_active(bundle: PatientBundle, now: datetime) -> bool:
    cutoff = now - timedelta(days=ACTIVE_WINDOW_DAYS)
    return any(c.created_at is not None and c.created_at > cutoff for c in bundle.check_ins)


def simplified_health_score(bundle: PatientBundle) -> int:
    """Population-view score: base 70, penalised for out-of-range vitals."""
    score = 70
    latest = bundle.latest
    if latest is not None:
        if latest.bp_systolic is not None and latest.bp_systolic > 140:
            score -= 10
        if latest.heart_rate is not None and (latest.heart_rate > 100 or latest.heart_rate < 60):
            score -= 8
        if latest.glucose is not None and latest.glucose > 180:
            score -= 12
        if latest.oxygen_saturation is not None and latest.oxygen_saturation < 95:
            score -= 15

    check_in_count = len(bundle.check_ins)
    if check_in_count > 20:
        score += 10
    elif check_in_count > 10:
        score += 5
    return max(0, min(100, score))


def calculate_population_health_score(bundles: Sequence[PatientBundle]) -> int:
    if not bundles:
        return 0
    return round_half_up(sum(simplified_health_score(b) for b in bundles) / len(bundles))


def identify_trending_concerns(assessments: Sequence[RiskAssessment], limit: int = TOP_CONCERNS) -> list[str]:
    """Most frequent risk factors; ties keep first-encountered order."""
    counts: Counter[str] = Counter()
    for assessment in assessments:
        counts.update(assessment.risk_factors)
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [factor for factor, _ in ranked[:limit]]


def analyze_common_conditions(bundles: Sequence[PatientBundle]) -> list[ConditionPrevalence]:
    """Prevalence from each patient's latest reading only."""
    counts = {"Hypertension": 0, "Diabetes": 0, "Tachycardia": 0}
    for bundle in bundles:
        latest = bundle.latest
        if latest is None:
            continue
        if latest.bp_systolic is not None and latest.bp_systolic > 140:
            counts["Hypertension"] += 1
        if latest.glucose is not None and latest.glucose > 126:
            counts["Diabetes"] += 1
        if latest.heart_rate is not None and latest.heart_rate > 100:
            counts["Tachycardia"] += 1

    total = len(bundles)
    return [
        ConditionPrevalence(condition=name, prevalence=round_half_up(count / total * 100) if total else 0)
        for name, count in counts.items()
    ]


def calculate_population_adherence(
    bundles: Sequence[PatientBundle],
    now: datetime,
    window_days: int = 30,
) -> int:
    if not bundles:
        return 0
    scores = [calculate_adherence_score(b.check_ins, now, window_days) for b in bundles]
    return round_half_up(sum(scores) / len(scores))


def _age(dob: object, today: date) -> int | None:
    born = parse_timestamp(dob)
    if born is None:
        return None
    return today.year - born.year


def calculate_average_age(bundles: Sequence[PatientBundle], now: datetime) -> int:
    ages = [a for a in (_age(b.profile.get("dob"), now.date()) for b in bundles) if a is not None]
    if not ages:
        return 0
    return round_half_up(sum(ages) / len(ages))


def generate_population_recommendations(
    risk_distribution: dict[str, int],
    adherence_rate: int,
    trending_concerns: Sequence[str],
) -> list[PopulationRecommendation]:
    recommendations: list[PopulationRecommendation] = []

    if risk_distribution["high"] + risk_distribution["critical"] > risk_distribution["low"]:
        recommendations.append(PopulationRecommendation(
            type="RESOURCE_ALLOCATION",
            recommendation="Increase clinical staff allocation for high-risk patient management",
            expected_impact="Reduced emergency incidents and improved patient outcomes",
            implementation_effort="HIGH",
            priority=5,
        ))

    if adherence_rate < HIGH_ADHERENCE:
        recommendations.append(PopulationRecommendation(
            type="INTERVENTION_PROGRAM",
            recommendation="Implement patient engagement and adherence improvement program",
            expected_impact="Increased check-in compliance and better health monitoring",
            implementation_effort="MEDIUM",
            priority=4,
        ))

    if mentions(trending_concerns, ("blood pressure", "hypertens")):
        recommendations.append(PopulationRecommendation(
            type="POLICY_CHANGE",
            recommendation="Develop population-wide hypertension management protocol",
            expected_impact="Reduced cardiovascular events across patient population",
            implementation_effort="MEDIUM",
            priority=4,
        ))

    recommendations.sort(key=lambda r: -r.priority)
    return recommendations


def generate_population_predictions(
    assessments: Sequence[RiskAssessment],
    average_age: int,
) -> list[PopulationPrediction]:
    high_risk = sum(1 for a in assessments if a.risk_level in ("HIGH", "CRITICAL"))
    percentage = high_risk / len(assessments) * 100 if assessments else 0.0

    predictions = [PopulationPrediction(
        metric="High-risk patient percentage",
        prediction=(
            f"Expected to {'increase' if percentage > 25 else 'remain stable'} "
            f"at {round_half_up(percentage)}%"
        ),
        timeframe="3 months",
        confidence=75,
        factors_influencing=["Current trend patterns", "Seasonal variations", "Intervention effectiveness"],
    )]

    if average_age > 65:
        predictions.append(PopulationPrediction(
            metric="Emergency incidents",
            prediction="Likely to increase by 15-20% due to aging population",
            timeframe="6 months",
            confidence=70,
            factors_influencing=[
                "Population age demographics",
                "Chronic condition prevalence",
                "Seasonal factors",
            ],
        ))
    return predictions


def generate_population_insights(
    bundles: Sequence[PatientBundle],
    config: AnalyticsConfiguration,
    now: datetime,
) -> PopulationInsights:
    assessments = [assess_patient_risk(b, config, now) for b in bundles]

    distribution = {"low": 0, "moderate": 0, "high": 0, "critical": 0}
    for assessment in assessments:
        distribution[assessment.risk_level.lower()] += 1

    concerns = identify_trending_concerns(assessments)
    adherence = calculate_population_adherence(
        bundles, now, config.adherence_settings.adherence_window_days
    )
    average_age = calculate_average_age(bundles, now)

    logger.info(
        "Population analysis: %d patients, %d high risk",
        len(bundles),
        distribution["high"] + distribution["critical"],
    )
    return PopulationInsights(
        total_patients=len(bundles),
        active_patients=sum(1 for b in bundles if is_active(b, now)),
        high_risk_patients=distribution["high"] + distribution["critical"],
        average_health_score=calculate_population_health_score(bundles),
        trending_concerns=concerns,
        population_metrics=PopulationMetrics(
            average_age=average_age,
            risk_distribution=distribution,
            common_conditions=analyze_common_conditions(bundles),
            adherence_rate=adherence,
        ),
        recommendations=generate_population_recommendations(distribution, adherence, concerns),
        predictive_analytics=generate_population_predictions(assessments, average_age),
    )


def build_risk_matrix(insights: Sequence[PatientInsight]) -> RiskMatrix:
    """Place each patient in a risk x adherence quadrant."""
    quadrants = {
        "high_risk_high_adherence": 0,
        "high_risk_low_adherence": 0,
        "low_risk_high_adherence": 0,
        "low_risk_low_adherence": 0,
    }
    for insight in insights:
        risk = "high_risk" if insight.risk_assessment.risk_level in ("HIGH", "CRITICAL") else "low_risk"
        adherence = "high_adherence" if insight.adherence_score >= HIGH_ADHERENCE else "low_adherence"
        quadrants[f"{risk}_{adherence}"] += 1

    return RiskMatrix(
        quadrants=quadrants,
        action_priority=[
            RiskMatrixCell(
                quadrant="High Risk, Low Adherence",
                patient_count=quadrants["high_risk_low_adherence"],
                recommended_action="Immediate intervention and adherence support",
                urgency="CRITICAL",
            ),
            RiskMatrixCell(
                quadrant="High Risk, High Adherence",
                patient_count=quadrants["high_risk_high_adherence"],
                recommended_action="Intensive monitoring and clinical review",
                urgency="HIGH",
            ),
            RiskMatrixCell(
                quadrant="Low Risk, Low Adherence",
                patient_count=quadrants["low_risk_low_adherence"],
                recommended_action="Engagement improvement programs",
                urgency="MEDIUM",
            ),
            RiskMatrixCell(
                quadrant="Low Risk, High Adherence",
                patient_count=quadrants["low_risk_high_adherence"],
                recommended_action="Maintenance and prevention focus",
                urgency="LOW",
            ),
        ],
    )
