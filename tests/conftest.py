"""Shared test fixtures for riskwatch tests."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANALYTICS_CONFIG_PATH", "")
    monkeypatch.setenv("MOCK_COHORT_SIZE", "12")
    monkeypatch.setenv("RISKWATCH_HOST", "127.0.0.1")
    monkeypatch.setenv("RISKWATCH_ALLOW_INSECURE_BIND", "false")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from riskwatch.domains.health.domain_logic.configuration import (  # noqa: E402
    AnalyticsConfiguration,
    default_configuration,
)
from riskwatch.domains.health.domain_logic.engine import HealthAnalyticsEngine  # noqa: E402

# Every time-dependent computation in the suite is evaluated at this instant.
NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def ts(days_ago: float = 0, hours_ago: float = 0) -> str:
    """ISO timestamp relative to the fixed test clock."""
    return (NOW - timedelta(days=days_ago, hours=hours_ago)).isoformat()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def config() -> AnalyticsConfiguration:
    return default_configuration()


@pytest.fixture
def engine() -> HealthAnalyticsEngine:
    """Engine with default thresholds and a frozen clock."""
    return HealthAnalyticsEngine(clock=lambda: NOW)


# ---------------------------------------------------------------------------
# Raw record builders
# ---------------------------------------------------------------------------

@pytest.fixture
def make_reading():
    """Build a raw vitals row ``days_ago`` days before the test clock."""
    def _make(days_ago: float = 0, **fields: Any) -> dict[str, Any]:
        return {"created_at": ts(days_ago), **fields}
    return _make


@pytest.fixture
def make_check_ins():
    """Build raw check-in rows, one per ``days_ago`` value, in the given order."""
    def _make(*days_ago: float) -> list[dict[str, Any]]:
        return [{"created_at": ts(d)} for d in days_ago]
    return _make


@pytest.fixture
def daily_check_ins(make_check_ins) -> list[dict[str, Any]]:
    """Thirty daily check-ins ending today (100% adherence)."""
    return make_check_ins(*range(30))


@pytest.fixture
def healthy_bundle(make_reading, daily_check_ins) -> dict[str, Any]:
    return {
        "profile": {"user_id": "p-healthy", "first_name": "Ada", "last_name": "Okafor", "dob": "1950-01-01"},
        "vitals": [
            make_reading(0, bp_systolic=118, bp_diastolic=76, heart_rate=72,
                         glucose_mg_dl=100, pulse_oximeter=98),
            make_reading(1, bp_systolic=117, bp_diastolic=75, heart_rate=71,
                         glucose_mg_dl=98, pulse_oximeter=98),
        ],
        "checkIns": daily_check_ins,
    }


@pytest.fixture
def critical_bundle(make_reading) -> dict[str, Any]:
    """Every vital past its critical bound and no check-in history."""
    return {
        "profile": {"user_id": "p-critical", "first_name": "Bola", "last_name": "Reyes", "dob": "1950-01-01"},
        "vitals": [
            make_reading(0, bp_systolic=190, bp_diastolic=125, heart_rate=140,
                         glucose_mg_dl=450, spo2=80),
        ],
        "checkIns": [],
    }


@pytest.fixture
def disengaged_bundle(make_reading, make_check_ins) -> dict[str, Any]:
    return {
        "profile": {"user_id": "p-disengaged", "first_name": "Chen", "last_name": "Moreau", "dob": "1950-01-01"},
        "vitals": [make_reading(40, bp_systolic=128, bp_diastolic=82, heart_rate=66)],
        "checkIns": make_check_ins(40),
    }
