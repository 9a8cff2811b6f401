"""Short-horizon trend analysis over a patient's most recent readings.

Compares the latest readings per metric, flags values outside reference
ranges, scores direction-of-change risk and classifies the overall trend
direction (improving / stable / declining).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from riskwatch.domains.health.domain_logic.configuration import TrendSettings
from riskwatch.domains.health.domain_logic.models import (
    VITAL_METRICS,
    NormalRange,
    ScoreResult,
    Trend,
    TrendDirection,
    VitalMetric,
    VitalReading,
    VitalsTrend,
)

logger = logging.getLogger(__name__)

NORMAL_RANGES: dict[VitalMetric, NormalRange] = {
    "bp_systolic": NormalRange(min=90, max=120),
    "bp_diastolic": NormalRange(min=60, max=80),
    "heart_rate": NormalRange(min=60, max=100),
    "glucose_mg_dl": NormalRange(min=70, max=140),
    "pulse_oximeter": NormalRange(min=95, max=100),
}

_VITAL_RECOMMENDATIONS: dict[str, dict[str, str]] = {
    "bp_systolic": {
        "high": "Consider antihypertensive medication adjustment",
        "low": "Monitor for hypotension symptoms",
    },
    "heart_rate": {
        "high": "Evaluate for tachycardia causes",
        "low": "Assess for bradycardia complications",
    },
    "glucose_mg_dl": {
        "high": "Review diabetes management plan",
        "low": "Address hypoglycemia risk factors",
    },
}


def signed_change_percent(first: float | None, last: float | None) -> float:
    """Percent change from ``first`` to ``last``; 0 when undefined."""
    if first is None or last is None or first == 0:
        return 0.0
    return (last - first) / first * 100


def classify_change(first: float | None, last: float | None, band: float = 5) -> Trend:
    """RISING / FALLING when the change leaves the +/- ``band`` percent band."""
    change = signed_change_percent(first, last)
    if change > band:
        return "RISING"
    if change < -band:
        return "FALLING"
    return "STABLE"


def vital_recommendation(metric: VitalMetric, value: float, normal_range: NormalRange) -> str:
    status = "high" if value > normal_range.max else "low"
    return _VITAL_RECOMMENDATIONS.get(metric, {}).get(status, "Consult healthcare provider")


class TrendAnalyzer:
    """Computes per-metric trends and trend-derived risk from recent readings.

    Readings are expected most recent first.

    Usage::

        analyzer = TrendAnalyzer(config.trend_settings)
        trends = analyzer.analyze_vitals_trends(readings)
        direction = analyzer.calculate_trend_direction(readings)
    """

    def __init__(self, settings: TrendSettings) -> None:
        self._settings = settings

    def calculate_vital_trend(
        self,
        vitals: Sequence[VitalReading],
        metric: VitalMetric,
    ) -> VitalsTrend | None:
        """Compare the two most recent readings for one metric.

        Returns None when the latest reading has no value for the metric.
        A missing previous value falls back to the current one (0% change).
        """
        if not vitals:
            return None
        current = vitals[0].value_for(metric)
        if current is None:
            return None
        previous = vitals[1].value_for(metric) if len(vitals) > 1 else None
        if previous is None:
            previous = current

        change = signed_change_percent(previous, current)
        trend = classify_change(previous, current, self._settings.stable_band_percent)

        normal_range = NORMAL_RANGES[metric]
        is_abnormal = current < normal_range.min or current > normal_range.max

        return VitalsTrend(
            metric=metric,
            current=current,
            previous=previous,
            trend=trend,
            change_percent=abs(change),
            is_abnormal=is_abnormal,
            normal_range=normal_range,
            recommendation=(
                vital_recommendation(metric, current, normal_range) if is_abnormal else None
            ),
        )

    def analyze_vitals_trends(self, vitals: Sequence[VitalReading]) -> list[VitalsTrend]:
        """Trends for every measured metric on the latest reading."""
        trends = []
        for metric in VITAL_METRICS:
            trend = self.calculate_vital_trend(vitals, metric)
            if trend is not None:
                trends.append(trend)
        return trends

    def analyze_trend_risk(self, vitals: Sequence[VitalReading]) -> ScoreResult:
        """Risk from the direction and size of recent BP and heart-rate moves."""
        result = ScoreResult()
        if len(vitals) < 2:
            return result

        bp = self.calculate_vital_trend(vitals, "bp_systolic")
        if bp is not None and bp.change_percent > self._settings.bp_change_percent:
            rising = bp.trend == "RISING"
            result.score += 15 if rising else 5
            result.factors.append(
                f"Blood pressure {bp.trend.lower()} by {bp.change_percent:.1f}%"
            )
            result.recommendations.append(
                "Blood pressure management intervention needed"
                if rising
                else "Monitor blood pressure improvements"
            )

        hr = self.calculate_vital_trend(vitals, "heart_rate")
        if hr is not None and hr.change_percent > self._settings.heart_rate_change_percent:
            result.score += 8
            result.factors.append(
                f"Heart rate {hr.trend.lower()} by {hr.change_percent:.1f}%"
            )
            result.recommendations.append("Cardiac monitoring and evaluation recommended")

        return result

    def calculate_trend_direction(self, vitals: Sequence[VitalReading]) -> TrendDirection:
        """Net improvement over the three most recent readings.

        Only blood pressure and heart rate are considered.
        """
        if len(vitals) < 3:
            return "STABLE"

        hr_range = NORMAL_RANGES["heart_rate"]
        recent = list(vitals[:3])
        improvement = 0
        for current, previous in zip(recent, recent[1:]):
            if current.bp_systolic is not None and previous.bp_systolic is not None:
                if current.bp_systolic < previous.bp_systolic and current.bp_systolic <= 120:
                    improvement += 1
                elif current.bp_systolic > previous.bp_systolic and current.bp_systolic > 140:
                    improvement -= 1

            if current.heart_rate is not None and previous.heart_rate is not None:
                in_range = hr_range.min <= current.heart_rate <= hr_range.max
                was_in_range = hr_range.min <= previous.heart_rate <= hr_range.max
                if in_range and not was_in_range:
                    improvement += 1
                elif was_in_range and not in_range:
                    improvement -= 1

        logger.debug("Trend direction improvement score: %d", improvement)
        if improvement > 0:
            return "IMPROVING"
        if improvement < 0:
            return "DECLINING"
        return "STABLE"
