"""Absolute-value risk scorers for single vital-sign readings.

Each scorer returns a ScoreResult. Tiers are checked from most to least
severe and only the first matching tier contributes. An absent value
contributes nothing.
"""

from __future__ import annotations

from riskwatch.domains.health.domain_logic.configuration import RiskThresholds
from riskwatch.domains.health.domain_logic.models import ScoreResult, VitalReading


def _gte(value: float | None, bound: float) -> bool:
    return value is not None and value >= bound


# ---------------------------------------------------------------------------
# Blood pressure
# ---------------------------------------------------------------------------

def assess_blood_pressure_risk(
    systolic: float | None,
    diastolic: float | None,
    thresholds: RiskThresholds,
) -> ScoreResult:
    """Score blood pressure against crisis / stage 2 / stage 1 tiers."""
    if systolic is None and diastolic is None:
        return ScoreResult()

    sys_t = thresholds.blood_pressure.systolic
    dia_t = thresholds.blood_pressure.diastolic

    if _gte(systolic, sys_t.critical) or _gte(diastolic, dia_t.critical):
        return ScoreResult(
            30,
            ["Hypertensive crisis - critical blood pressure"],
            ["Immediate emergency medical attention required"],
        )
    if _gte(systolic, sys_t.high) or _gte(diastolic, dia_t.high):
        return ScoreResult(
            20,
            ["Stage 2 hypertension detected"],
            ["Medication review and lifestyle modifications needed"],
        )
    if _gte(systolic, sys_t.elevated) or _gte(diastolic, dia_t.elevated):
        return ScoreResult(
            10,
            ["Stage 1 hypertension detected"],
            ["Lifestyle modifications and possible medication initiation"],
        )
    return ScoreResult()


# ---------------------------------------------------------------------------
# Heart rate
# ---------------------------------------------------------------------------

def assess_heart_rate_risk(heart_rate: float | None, thresholds: RiskThresholds) -> ScoreResult:
    if heart_rate is None:
        return ScoreResult()

    hr = thresholds.heart_rate
    if heart_rate > hr.critical or heart_rate < hr.low:
        label = "Severe tachycardia" if heart_rate > hr.critical else "Severe bradycardia"
        return ScoreResult(
            25,
            [f"{label} detected"],
            ["Immediate cardiac evaluation required"],
        )
    if heart_rate > hr.high or heart_rate < hr.mild_low:
        label = "Mild tachycardia" if heart_rate > hr.high else "Mild bradycardia"
        return ScoreResult(
            10,
            [f"{label} detected"],
            ["Monitor heart rate trends and consider cardiology consultation"],
        )
    return ScoreResult()


# ---------------------------------------------------------------------------
# Glucose
# ---------------------------------------------------------------------------

def assess_glucose_risk(glucose: float | None, thresholds: RiskThresholds) -> ScoreResult:
    if glucose is None:
        return ScoreResult()

    g = thresholds.glucose
    if glucose > g.critical or glucose < g.severe_low:
        label = "Severe hyperglycemia" if glucose > g.critical else "Severe hypoglycemia"
        return ScoreResult(
            30,
            [f"{label} detected"],
            ["Immediate medical intervention required"],
        )
    if glucose > g.high or glucose < g.low:
        label = "Significant hyperglycemia" if glucose > g.high else "Hypoglycemia"
        return ScoreResult(
            15,
            [f"{label} detected"],
            ["Diabetes management review and medication adjustment needed"],
        )
    if glucose > g.elevated:
        return ScoreResult(
            8,
            ["Elevated blood glucose levels"],
            ["Dietary review and possible medication adjustment"],
        )
    return ScoreResult()


# ---------------------------------------------------------------------------
# Oxygen saturation
# ---------------------------------------------------------------------------

def assess_oxygen_saturation_risk(oxygen: float | None, thresholds: RiskThresholds) -> ScoreResult:
    if oxygen is None:
        return ScoreResult()

    o = thresholds.oxygen_saturation
    if oxygen < o.critical:
        return ScoreResult(
            30,
            ["Critical oxygen saturation level"],
            ["Immediate oxygen therapy and emergency care required"],
        )
    if oxygen < o.reduced:
        return ScoreResult(
            15,
            ["Low oxygen saturation"],
            ["Respiratory assessment and possible oxygen supplementation needed"],
        )
    if oxygen < o.low:
        return ScoreResult(
            8,
            ["Borderline low oxygen saturation"],
            ["Monitor respiratory status closely"],
        )
    return ScoreResult()


def score_reading(reading: VitalReading | None, thresholds: RiskThresholds) -> list[ScoreResult]:
    """Run all four scorers over one reading, in BP, HR, glucose, oxygen order."""
    if reading is None:
        return []
    return [
        assess_blood_pressure_risk(reading.bp_systolic, reading.bp_diastolic, thresholds),
        assess_heart_rate_risk(reading.heart_rate, thresholds),
        assess_glucose_risk(reading.glucose, thresholds),
        assess_oxygen_saturation_risk(reading.oxygen_saturation, thresholds),
    ]
