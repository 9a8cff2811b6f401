"""Analytics configuration: every threshold the scorers and detectors read.

The defaults reproduce the clinical tier boundaries the engine has always
used. Callers replace the whole tree or merge a partial mapping over it; the
merged result is validated for shape before it takes effect.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ConfigurationError(ValueError):
    """Raised when a configuration update does not match the expected shape."""


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True)


# ---------------------------------------------------------------------------
# Risk thresholds
# ---------------------------------------------------------------------------

class PressureBounds(_Section):
    elevated: float
    high: float
    critical: float


class BloodPressureThresholds(_Section):
    systolic: PressureBounds = Field(
        default_factory=lambda: PressureBounds(elevated=130, high=140, critical=180)
    )
    diastolic: PressureBounds = Field(
        default_factory=lambda: PressureBounds(elevated=80, high=90, critical=120)
    )


class HeartRateThresholds(_Section):
    low: float = 50          # severe bradycardia / alert bound
    mild_low: float = 60
    high: float = 100
    critical: float = 120    # severe tachycardia / alert bound


class GlucoseThresholds(_Section):
    severe_low: float = 50
    low: float = 70
    elevated: float = 180
    high: float = 250
    critical: float = 400


class OxygenSaturationThresholds(_Section):
    low: float = 95
    reduced: float = 92
    critical: float = 88


class RiskThresholds(_Section):
    blood_pressure: BloodPressureThresholds = Field(default_factory=BloodPressureThresholds)
    heart_rate: HeartRateThresholds = Field(default_factory=HeartRateThresholds)
    glucose: GlucoseThresholds = Field(default_factory=GlucoseThresholds)
    oxygen_saturation: OxygenSaturationThresholds = Field(default_factory=OxygenSaturationThresholds)


# ---------------------------------------------------------------------------
# Adherence, trend and alert behaviour
# ---------------------------------------------------------------------------

class AdherenceSettings(_Section):
    missed_check_in_threshold: float = 3      # days
    low_adherence_threshold: float = 60       # percent
    very_low_adherence_threshold: float = 30  # percent
    check_in_gap_days: float = 7
    adherence_window_days: int = Field(default=30, gt=0)


class TrendSettings(_Section):
    stable_band_percent: float = 5
    bp_change_percent: float = 20
    heart_rate_change_percent: float = 15


class AlertSettings(_Section):
    enable_predictive_alerts: bool = True
    alert_cooldown_hours: float = 4
    emergency_contact_threshold_hours: float = 1


class AnalyticsConfiguration(_Section):
    risk_thresholds: RiskThresholds = Field(default_factory=RiskThresholds)
    adherence_settings: AdherenceSettings = Field(default_factory=AdherenceSettings)
    trend_settings: TrendSettings = Field(default_factory=TrendSettings)
    alert_settings: AlertSettings = Field(default_factory=AlertSettings)


def default_configuration() -> AnalyticsConfiguration:
    """Return a fresh configuration populated with the default thresholds."""
    return AnalyticsConfiguration()


def _deep_merge(base: dict[str, Any], changes: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in changes.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def merge_configuration(
    current: AnalyticsConfiguration,
    changes: Mapping[str, Any],
) -> AnalyticsConfiguration:
    """Merge a partial nested mapping over ``current`` and validate the result.

    Raises:
        ConfigurationError: unknown keys or wrongly typed values.
    """
    if not isinstance(changes, Mapping):
        raise ConfigurationError("configuration changes must be a mapping")
    merged = _deep_merge(current.model_dump(), changes)
    try:
        return AnalyticsConfiguration.model_validate(merged)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid configuration: {exc}") from exc
