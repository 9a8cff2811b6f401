"""Mock patient bundles for development and testing.

The cohort cycles through a handful of archetypes (steady, hypertensive,
diabetic, deteriorating, disengaged, emergency) so every branch of the
analytics engine has data. Timestamps are relative to ``now``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

_FIRST_NAMES = ["Ada", "Bola", "Chen", "Dara", "Eli", "Fatima", "Gus", "Hana", "Ivo", "June"]
_LAST_NAMES = ["Okafor", "Lindqvist", "Moreau", "Patel", "Reyes", "Schmidt", "Tanaka", "Walsh"]


def _ts(now: datetime, days_ago: float) -> str:
    return (now - timedelta(days=days_ago)).isoformat()


def _steady(now: datetime) -> tuple[list[dict], list[dict]]:
    vitals = [
        {"created_at": _ts(now, d), "bp_systolic": 118, "bp_diastolic": 76,
         "heart_rate": 72, "glucose_mg_dl": 98, "pulse_oximeter": 98,
         "weight": 71.4, "mood": "Good", "physical_activity": "30 min walk"}
        for d in range(0, 14)
    ]
    check_ins = [{"created_at": _ts(now, d)} for d in range(0, 28)]
    return vitals, check_ins


def _hypertensive(now: datetime) -> tuple[list[dict], list[dict]]:
    vitals = [
        {"created_at": _ts(now, 0.2), "bp_systolic": 152, "bp_diastolic": 94, "heart_rate": 88,
         "blood_sugar": 110, "spo2": 97, "mood": "Okay"},
        {"created_at": _ts(now, 2), "bp_systolic": 146, "bp_diastolic": 92, "heart_rate": 84,
         "blood_sugar": 104, "spo2": 97, "mood": "Okay"},
        {"created_at": _ts(now, 4), "bp_systolic": 138, "bp_diastolic": 88, "heart_rate": 80},
    ]
    check_ins = [{"created_at": _ts(now, d)} for d in range(0, 30, 2)]
    return vitals, check_ins


def _diabetic(now: datetime) -> tuple[list[dict], list[dict]]:
    vitals = [
        {"created_at": _ts(now, 0.5), "glucose_mg_dl": 268, "heart_rate": 92,
         "blood_oxygen": 96, "symptoms": "Thirsty, tired"},
        {"created_at": _ts(now, 1.5), "blood_sugar": 231, "heart_rate": 90},
    ]
    check_ins = [{"created_at": _ts(now, d)} for d in range(0, 30, 5)]
    return vitals, check_ins


def _deteriorating(now: datetime) -> tuple[list[dict], list[dict]]:
    vitals = [
        {"created_at": _ts(now, 0.1), "bp_systolic": 186, "bp_diastolic": 118, "heart_rate": 126,
         "pulse_oximeter": 89, "mood": "Anxious"},
        {"created_at": _ts(now, 1), "bp_systolic": 150, "bp_diastolic": 96, "heart_rate": 98,
         "pulse_oximeter": 93},
        {"created_at": _ts(now, 2), "bp_systolic": 136, "bp_diastolic": 88, "heart_rate": 90,
         "pulse_oximeter": 95},
    ]
    check_ins = [{"created_at": _ts(now, d)} for d in (9, 12, 20)]
    return vitals, check_ins


def _disengaged(now: datetime) -> tuple[list[dict], list[dict]]:
    vitals = [{"created_at": _ts(now, 40), "bp_systolic": 128, "bp_diastolic": 82, "heart_rate": 66}]
    return vitals, []


def _emergency(now: datetime) -> tuple[list[dict], list[dict]]:
    vitals = [
        {"created_at": _ts(now, 0.05), "bp_systolic": 122, "bp_diastolic": 78, "heart_rate": 84,
         "is_emergency": True, "activity_description": "Fell in the kitchen"},
    ]
    check_ins = [{"created_at": _ts(now, d)} for d in range(0, 20)]
    return vitals, check_ins


_ARCHETYPES = [_steady, _hypertensive, _diabetic, _deteriorating, _disengaged, _emergency]


def get_mock_patient_bundle(index: int, now: datetime | None = None) -> dict[str, Any]:
    """Return the raw bundle for the ``index``-th mock patient."""
    now = now or datetime.now(timezone.utc)
    vitals, check_ins = _ARCHETYPES[index % len(_ARCHETYPES)](now)
    return {
        "profile": {
            "user_id": f"mock-{index:03d}",
            "first_name": _FIRST_NAMES[index % len(_FIRST_NAMES)],
            "last_name": _LAST_NAMES[index % len(_LAST_NAMES)],
            "dob": f"{1940 + (index * 7) % 50}-06-15",
        },
        "vitals": vitals,
        "checkIns": check_ins,
    }


def get_mock_cohort(size: int = 12, now: datetime | None = None) -> list[dict[str, Any]]:
    """Return ``size`` mock bundles cycling through every archetype."""
    now = now or datetime.now(timezone.utc)
    return [get_mock_patient_bundle(i, now) for i in range(size)]
