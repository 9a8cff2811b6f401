"""Heuristic outcome estimates keyed off an assessment's risk factors.

These are deterministic formulas, not trained models.
"""

from __future__ import annotations

from collections.abc import Iterable

from riskwatch.domains.health.domain_logic.models import (
    PatientBundle,
    PredictedOutcome,
    RiskAssessment,
    VitalReading,
)

CARDIOVASCULAR_KEYWORDS = ("blood pressure", "hypertens", "heart rate", "tachycardia", "bradycardia")
GLUCOSE_KEYWORDS = ("glucose", "glycemia")


def mentions(factors: Iterable[str], keywords: Iterable[str]) -> bool:
    """Case-insensitive check whether any factor mentions any keyword."""
    keywords = [k.lower() for k in keywords]
    return any(k in factor.lower() for factor in factors for k in keywords)


def calculate_cardiovascular_risk(latest: VitalReading | None, risk_score: int) -> int:
    risk = risk_score * 0.6
    if latest is not None:
        if latest.bp_systolic is not None and latest.bp_systolic > 140:
            risk += 15
        if latest.heart_rate is not None and latest.heart_rate > 100:
            risk += 10
    return round(min(95, risk))


def calculate_diabetes_risk(latest: VitalReading | None, risk_score: int) -> int:
    risk = risk_score * 0.7
    glucose = latest.glucose if latest is not None else None
    if glucose is not None:
        if glucose > 250:
            risk += 20
        elif glucose > 180:
            risk += 10
    return round(min(90, risk))


def generate_predicted_outcomes(
    bundle: PatientBundle,
    assessment: RiskAssessment,
) -> list[PredictedOutcome]:
    outcomes: list[PredictedOutcome] = []
    factors = assessment.risk_factors

    if mentions(factors, CARDIOVASCULAR_KEYWORDS):
        outcomes.append(PredictedOutcome(
            condition="Cardiovascular Event",
            probability=calculate_cardiovascular_risk(bundle.latest, assessment.risk_score),
            timeframe="6 months",
            confidence_level="MEDIUM",
            based_on=["Blood pressure trends", "Heart rate patterns", "Risk score"],
        ))

    if mentions(factors, GLUCOSE_KEYWORDS):
        outcomes.append(PredictedOutcome(
            condition="Diabetes Complications",
            probability=calculate_diabetes_risk(bundle.latest, assessment.risk_score),
            timeframe="3 months",
            confidence_level="HIGH",
            based_on=["Glucose level trends", "Overall health score"],
        ))

    if assessment.risk_level in ("HIGH", "CRITICAL"):
        outcomes.append(PredictedOutcome(
            condition="Hospital Readmission",
            probability=min(85, assessment.risk_score + 15),
            timeframe="30 days",
            confidence_level="HIGH",
            based_on=["High risk score", "Multiple risk factors", "Recent vital trends"],
        ))

    return outcomes
