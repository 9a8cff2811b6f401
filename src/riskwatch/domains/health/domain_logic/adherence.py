"""Check-in adherence: risk contribution and the 0-100 adherence score."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime, timedelta

from riskwatch.domains.health.domain_logic.configuration import AdherenceSettings
from riskwatch.domains.health.domain_logic.models import CheckInRecord, ScoreResult

_SECONDS_PER_DAY = 86400.0

# Gaps longer than this (days) between consecutive check-ins cost 5 points.
_SCORE_GAP_DAYS = 3
_GAP_PENALTY = 5


def days_since(timestamp: datetime | None, now: datetime) -> float | None:
    """Elapsed days (fractional) between ``timestamp`` and ``now``."""
    if timestamp is None:
        return None
    return (now - timestamp).total_seconds() / _SECONDS_PER_DAY


def days_since_last_check_in(check_ins: Sequence[CheckInRecord], now: datetime) -> float | None:
    """Days since the most recent check-in, or None with no dated check-ins."""
    dated = [c.created_at for c in check_ins if c.created_at is not None]
    if not dated:
        return None
    return days_since(max(dated), now)


def recent_check_ins(
    check_ins: Sequence[CheckInRecord],
    now: datetime,
    window_days: int = 30,
) -> list[CheckInRecord]:
    """Check-ins strictly inside the trailing window, input order preserved."""
    cutoff = now - timedelta(days=window_days)
    return [c for c in check_ins if c.created_at is not None and c.created_at > cutoff]


def assess_adherence_risk(
    check_ins: Sequence[CheckInRecord],
    now: datetime,
    settings: AdherenceSettings,
) -> ScoreResult:
    """Risk contribution from check-in frequency and the latest gap.

    The frequency tier and the gap penalty are independent and additive.
    """
    if not check_ins:
        return ScoreResult(
            20,
            ["No check-in history available"],
            ["Establish regular check-in routine"],
        )

    result = ScoreResult()
    window = settings.adherence_window_days
    rate = len(recent_check_ins(check_ins, now, window)) / window * 100

    if rate < settings.very_low_adherence_threshold:
        result.score += 15
        result.factors.append("Very low check-in adherence")
        result.recommendations.append("Patient engagement program and adherence support needed")
    elif rate < settings.low_adherence_threshold:
        result.score += 8
        result.factors.append("Low check-in adherence")
        result.recommendations.append("Improve patient engagement and simplify check-in process")

    elapsed = days_since_last_check_in(check_ins, now)
    if elapsed is not None and elapsed > settings.check_in_gap_days:
        result.score += 10
        result.factors.append(f"{math.floor(elapsed)} days since last check-in")
        result.recommendations.append("Contact patient to ensure continued engagement")

    return result


def check_in_gaps(check_ins: Sequence[CheckInRecord]) -> list[float]:
    """Day gaps between consecutive check-ins (most recent first input)."""
    dated = [c.created_at for c in check_ins if c.created_at is not None]
    return [
        (newer - older).total_seconds() / _SECONDS_PER_DAY
        for newer, older in zip(dated, dated[1:])
    ]


def calculate_adherence_score(
    check_ins: Sequence[CheckInRecord],
    now: datetime,
    window_days: int = 30,
) -> int:
    """Adherence 0-100: daily check-ins expected, minus 5 per gap over 3 days."""
    if not check_ins:
        return 0
    recent = recent_check_ins(check_ins, now, window_days)
    base = min(100.0, len(recent) / window_days * 100)
    penalty = sum(_GAP_PENALTY for gap in check_in_gaps(recent) if gap > _SCORE_GAP_DAYS)
    return round(max(0.0, base - penalty))
