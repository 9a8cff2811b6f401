"""Boundary conversion: raw reading rows -> canonical typed readings.

Source tables report the same physiological signal under different field
names (glucose as ``glucose_mg_dl`` or ``blood_sugar``; oxygen saturation as
``pulse_oximeter``, ``spo2`` or ``blood_oxygen``). Alias resolution happens
here and only here, so scoring, trend analysis and aggregation all derive the
same value from the same row.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from riskwatch.domains.health.domain_logic.models import (
    CheckInRecord,
    PatientBundle,
    VitalReading,
)

logger = logging.getLogger(__name__)

GLUCOSE_ALIASES = ("glucose_mg_dl", "blood_sugar")
OXYGEN_ALIASES = ("pulse_oximeter", "spo2", "blood_oxygen")

# Values outside these bounds are measurement or entry errors.
PLAUSIBLE_RANGES: dict[str, tuple[float, float]] = {
    "bp_systolic": (50, 300),
    "bp_diastolic": (30, 200),
    "heart_rate": (30, 250),
    "glucose": (20, 800),
    "oxygen_saturation": (50, 100),
}


def _num(val: Any) -> float | None:
    """Coerce to float; None for absent, boolean, non-numeric or non-finite values."""
    if val is None or isinstance(val, bool):
        return None
    try:
        value = float(val)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _text(val: Any) -> str | None:
    if val is None:
        return None
    text = str(val).strip()
    return text or None


def _first_present(raw: Mapping[str, Any], aliases: Iterable[str]) -> float | None:
    for name in aliases:
        value = _num(raw.get(name))
        if value is not None:
            return value
    return None


def resolve_glucose(raw: Mapping[str, Any]) -> float | None:
    """Glucose from the canonical field, falling back to the alternate name."""
    return _first_present(raw, GLUCOSE_ALIASES)


def resolve_oxygen(raw: Mapping[str, Any]) -> float | None:
    """Oxygen saturation from the canonical field, then the two alternates."""
    return _first_present(raw, OXYGEN_ALIASES)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 timestamp into an aware UTC datetime.

    Naive values are taken as UTC. Returns None when the value cannot be parsed.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    try:
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        # Offsets that push the instant outside datetime.min..max.
        return None


def parse_reading(raw: Mapping[str, Any] | VitalReading) -> VitalReading:
    """Convert one raw row into a VitalReading."""
    if isinstance(raw, VitalReading):
        return raw
    return VitalReading(
        created_at=parse_timestamp(raw.get("created_at")),
        bp_systolic=_num(raw.get("bp_systolic")),
        bp_diastolic=_num(raw.get("bp_diastolic")),
        heart_rate=_num(raw.get("heart_rate")),
        glucose=resolve_glucose(raw),
        oxygen_saturation=resolve_oxygen(raw),
        weight=_num(raw.get("weight")),
        mood=_text(raw.get("mood")),
        physical_activity=_text(raw.get("physical_activity")),
        social_engagement=_text(raw.get("social_engagement")),
        symptoms=_text(raw.get("symptoms")),
        activity_description=_text(raw.get("activity_description")),
        is_emergency=bool(raw.get("is_emergency")),
    )


def parse_readings(rows: Iterable[Mapping[str, Any] | VitalReading] | None) -> list[VitalReading]:
    return [parse_reading(row) for row in rows or []]


def parse_check_in(raw: Mapping[str, Any] | CheckInRecord) -> CheckInRecord:
    if isinstance(raw, CheckInRecord):
        return raw
    return CheckInRecord(created_at=parse_timestamp(raw.get("created_at")))


def parse_bundle(raw: Mapping[str, Any] | PatientBundle, patient_id: str = "") -> PatientBundle:
    """Convert a raw ``{profile, vitals, checkIns}`` payload into a PatientBundle.

    Accepts both ``check_ins`` and ``checkIns`` for the check-in list.
    """
    if isinstance(raw, PatientBundle):
        return raw
    profile = dict(raw.get("profile") or {})
    check_ins = raw.get("check_ins")
    if check_ins is None:
        check_ins = raw.get("checkIns")
    return PatientBundle(
        patient_id=str(patient_id or raw.get("patient_id") or profile.get("user_id") or ""),
        profile=profile,
        vitals=parse_readings(raw.get("vitals")),
        check_ins=[parse_check_in(c) for c in check_ins or []],
    )


# ---------------------------------------------------------------------------
# Plausibility cleaning (opt-in)
# ---------------------------------------------------------------------------

def sanitize_reading(reading: VitalReading) -> tuple[VitalReading, list[str]]:
    """Drop physiologically implausible values from a reading.

    Returns:
        (cleaned reading, list of issue descriptions)
    """
    issues: list[str] = []
    changes: dict[str, None] = {}
    for name, (lo, hi) in PLAUSIBLE_RANGES.items():
        value = getattr(reading, name)
        if value is not None and not lo <= value <= hi:
            changes[name] = None
            issues.append(f"{name}={value:g} outside plausible range {lo:g}-{hi:g}")
    if not changes:
        return reading, issues
    for issue in issues:
        logger.warning("Discarding implausible value: %s", issue)
    return replace(reading, **changes), issues


def validate_and_clean(readings: Iterable[VitalReading]) -> tuple[list[VitalReading], list[str]]:
    """Apply ``sanitize_reading`` to every reading.

    Returns:
        (cleaned readings in input order, all issues found)
    """
    cleaned: list[VitalReading] = []
    issues: list[str] = []
    for reading in readings:
        clean, found = sanitize_reading(reading)
        cleaned.append(clean)
        issues.extend(found)
    return cleaned, issues
