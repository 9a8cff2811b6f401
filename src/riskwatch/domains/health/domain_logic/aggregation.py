"""Daily, weekly and overall statistical rollups of raw readings.

Readings are grouped by UTC calendar date. Readings whose timestamp cannot
be parsed are left out of every rollup.
"""

from __future__ import annotations

import logging
import math
import statistics
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime

from riskwatch.domains.health.domain_logic.models import (
    DailyAggregates,
    DailyHealthLog,
    HealthStatistics,
    OverallStatistics,
    VitalReading,
    WeeklyHealthSummary,
    WeeklyTrends,
)
from riskwatch.domains.health.domain_logic.trend_analyzer import classify_change

logger = logging.getLogger(__name__)

WINDOW_DAYS = 7


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def date_key(reading: VitalReading) -> str | None:
    """YYYY-MM-DD for the reading's UTC date, or None without a timestamp."""
    if reading.created_at is None:
        return None
    return reading.created_at.date().isoformat()


def most_frequent(items: Sequence[str]) -> str | None:
    """Most common item; ties go to the one seen first."""
    if not items:
        return None
    counts = Counter(items)
    best = max(counts.values())
    return next(item for item in items if counts[item] == best)


def calculate_aggregates(readings: Iterable[VitalReading]) -> DailyAggregates:
    """Aggregate any set of readings (a day, a window or the full history)."""
    agg = DailyAggregates()

    systolic: list[float] = []
    diastolic: list[float] = []
    heart_rates: list[float] = []
    glucose: list[float] = []
    oxygen: list[float] = []
    weights: list[float] = []
    moods: list[str] = []

    for r in readings:
        if r.bp_systolic is not None:
            systolic.append(r.bp_systolic)
        if r.bp_diastolic is not None:
            diastolic.append(r.bp_diastolic)
        if r.heart_rate is not None:
            heart_rates.append(r.heart_rate)
        if r.glucose is not None:
            glucose.append(r.glucose)
        if r.oxygen_saturation is not None:
            oxygen.append(r.oxygen_saturation)
        if r.weight is not None:
            weights.append(r.weight)
        if r.mood:
            moods.append(r.mood)
        if r.physical_activity:
            agg.physical_activity.entries.append(r.physical_activity)
        if r.social_engagement:
            agg.social_engagement.entries.append(r.social_engagement)
        if r.symptoms:
            agg.symptoms.entries.append(r.symptoms)
        if r.activity_description:
            agg.symptoms.entries.append(r.activity_description)

    if systolic and diastolic:
        agg.blood_pressure.systolic = round_half_up(statistics.mean(systolic))
        agg.blood_pressure.diastolic = round_half_up(statistics.mean(diastolic))
        agg.blood_pressure.count = min(len(systolic), len(diastolic))

    for values, target in (
        (heart_rates, agg.heart_rate),
        (glucose, agg.blood_sugar),
        (oxygen, agg.blood_oxygen),
    ):
        if values:
            target.avg = round_half_up(statistics.mean(values))
            target.min = min(values)
            target.max = max(values)
            target.count = len(values)

    if weights:
        agg.weight.avg = round(statistics.mean(weights), 1)
        agg.weight.count = len(weights)

    if moods:
        agg.mood.predominant = most_frequent(moods)
        agg.mood.entries = moods

    return agg


def compute_daily_health_logs(readings: Iterable[VitalReading]) -> dict[str, DailyHealthLog]:
    """Group readings by calendar date, keyed ascending by ``YYYY-MM-DD``."""
    grouped: dict[str, list[VitalReading]] = {}
    skipped = 0
    for reading in readings:
        key = date_key(reading)
        if key is None:
            skipped += 1
            continue
        grouped.setdefault(key, []).append(reading)
    if skipped:
        logger.debug("Excluded %d reading(s) without a usable timestamp", skipped)

    return {
        key: DailyHealthLog(date=key, readings=grouped[key], aggregates=calculate_aggregates(grouped[key]))
        for key in sorted(grouped)
    }


def calculate_weekly_trends(days: Sequence[DailyHealthLog], band: float = 5) -> WeeklyTrends:
    """Per-metric trend from the first to the last day with data."""
    with_data = [d for d in days if d.readings]
    if len(with_data) < 2:
        return WeeklyTrends()

    first = with_data[0].aggregates
    last = with_data[-1].aggregates
    return WeeklyTrends(
        blood_pressure=classify_change(first.blood_pressure.systolic, last.blood_pressure.systolic, band),
        heart_rate=classify_change(first.heart_rate.avg, last.heart_rate.avg, band),
        blood_sugar=classify_change(first.blood_sugar.avg, last.blood_sugar.avg, band),
        blood_oxygen=classify_change(first.blood_oxygen.avg, last.blood_oxygen.avg, band),
        weight=classify_change(first.weight.avg, last.weight.avg, band),
        mood="STABLE",
    )


def calculate_weekly_summary(days: Sequence[DailyHealthLog], band: float = 5) -> WeeklyHealthSummary:
    readings = [r for day in days for r in day.readings]
    return WeeklyHealthSummary(
        week_start=days[0].date,
        week_end=days[-1].date,
        days_with_data=sum(1 for day in days if day.readings),
        total_readings=len(readings),
        aggregates=calculate_aggregates(readings),
        trends=calculate_weekly_trends(days, band),
    )


def compute_weekly_averages(
    daily_logs: Mapping[str, DailyHealthLog],
    band: float = 5,
) -> list[WeeklyHealthSummary]:
    """Windows of up to seven days-with-data, most recent window first.

    Calendar gaps are skipped: a window is seven consecutive *logged* days.
    """
    days = [daily_logs[key] for key in sorted(daily_logs) if daily_logs[key].readings]
    windows = [days[i:i + WINDOW_DAYS] for i in range(0, len(days), WINDOW_DAYS)]
    return [calculate_weekly_summary(window, band) for window in reversed(windows)]


def calculate_compliance_rate(readings: Sequence[VitalReading]) -> int:
    """Distinct reading dates over the inclusive calendar span, as a percent."""
    dates = {r.created_at.date() for r in readings if r.created_at is not None}
    if not dates:
        return 0
    span = (max(dates) - min(dates)).days + 1
    if span <= 1:
        return 100
    return round_half_up(len(dates) / span * 100)


def calculate_overall_statistics(readings: Sequence[VitalReading]) -> OverallStatistics:
    dated = [r for r in readings if r.created_at is not None]
    dates: list[date] = [r.created_at.date() for r in dated]  # type: ignore[union-attr]
    return OverallStatistics(
        total_readings=len(dated),
        date_range={
            "start": min(dates).isoformat() if dates else None,
            "end": max(dates).isoformat() if dates else None,
        },
        averages=calculate_aggregates(dated),
        compliance_rate=calculate_compliance_rate(dated),
    )


def compute_health_statistics(
    readings: Iterable[VitalReading],
    now: datetime,
    band: float = 5,
) -> HealthStatistics:
    daily_logs = compute_daily_health_logs(readings)
    all_readings = [r for log in daily_logs.values() for r in log.readings]
    return HealthStatistics(
        daily_logs=list(reversed(daily_logs.values())),
        weekly_averages=compute_weekly_averages(daily_logs, band),
        overall_stats=calculate_overall_statistics(all_readings),
        last_updated=now.isoformat(),
        data_points=len(all_readings),
    )
