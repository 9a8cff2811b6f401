"""Composite per-patient risk assessment.

Sums the four vital scorers (latest reading), the adherence scorer and the
trend-risk scorer, clamps the total to [0, 100] and maps it to a risk level.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from riskwatch.domains.health.domain_logic.adherence import assess_adherence_risk
from riskwatch.domains.health.domain_logic.configuration import AnalyticsConfiguration
from riskwatch.domains.health.domain_logic.models import (
    PatientBundle,
    RiskAssessment,
    RiskLevel,
    ScoreResult,
)
from riskwatch.domains.health.domain_logic.trend_analyzer import TrendAnalyzer
from riskwatch.domains.health.domain_logic.vital_scorers import score_reading

RISK_LEVEL_THRESHOLDS: list[tuple[int, RiskLevel]] = [
    (80, "CRITICAL"),
    (60, "HIGH"),
    (40, "MODERATE"),
]

BASE_PRIORITY: dict[RiskLevel, int] = {
    "CRITICAL": 5,
    "HIGH": 4,
    "MODERATE": 3,
    "LOW": 2,
}


def _clamp(value: int, lo: int = 0, hi: int = 100) -> int:
    return max(lo, min(hi, value))


def risk_level_for(score: int) -> RiskLevel:
    """Map a risk score to its level (boundaries inclusive)."""
    for bound, level in RISK_LEVEL_THRESHOLDS:
        if score >= bound:
            return level
    return "LOW"


def calculate_priority(level: RiskLevel, factor_count: int) -> int:
    """Base priority for the level, +1 with three or more factors, capped at 5."""
    bonus = 1 if factor_count >= 3 else 0
    return min(5, BASE_PRIORITY[level] + bonus)


def _unique(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))


def combine_scores(results: Iterable[ScoreResult]) -> ScoreResult:
    """Sum scores and merge factors/recommendations, first occurrence wins."""
    results = list(results)
    return ScoreResult(
        score=sum(r.score for r in results),
        factors=_unique(f for r in results for f in r.factors),
        recommendations=_unique(rec for r in results for rec in r.recommendations),
    )


def assess_patient_risk(
    bundle: PatientBundle,
    config: AnalyticsConfiguration,
    now: datetime,
) -> RiskAssessment:
    analyzer = TrendAnalyzer(config.trend_settings)
    combined = combine_scores([
        *score_reading(bundle.latest, config.risk_thresholds),
        assess_adherence_risk(bundle.check_ins, now, config.adherence_settings),
        analyzer.analyze_trend_risk(bundle.vitals),
    ])

    score = _clamp(combined.score)
    level = risk_level_for(score)
    return RiskAssessment(
        risk_level=level,
        risk_score=score,
        risk_factors=combined.factors,
        recommendations=combined.recommendations,
        priority=calculate_priority(level, len(combined.factors)),
        last_assessed=now.isoformat(),
        trend_direction=analyzer.calculate_trend_direction(bundle.vitals),
    )
