"""Threshold-based emergency alert detection.

Vital, missed-check-in and emergency-flag checks are independent; several
alerts may fire from one evaluation.
"""

from __future__ import annotations

import hashlib
import logging
import math
from collections.abc import Iterable
from datetime import datetime, timedelta

from riskwatch.domains.health.domain_logic.adherence import days_since_last_check_in
from riskwatch.domains.health.domain_logic.configuration import (
    AlertSettings,
    AnalyticsConfiguration,
)
from riskwatch.domains.health.domain_logic.models import (
    AlertSeverity,
    AlertType,
    EmergencyAlert,
    PatientBundle,
    RiskAssessment,
)
from riskwatch.domains.health.domain_logic.readings import parse_timestamp

logger = logging.getLogger(__name__)


def create_alert(
    severity: AlertSeverity,
    alert_type: AlertType,
    message: str,
    suggested_actions: list[str],
    now: datetime,
) -> EmergencyAlert:
    """Build an alert; the id is a stable digest of type, message and time."""
    timestamp = now.isoformat()
    digest = hashlib.sha256(f"{alert_type}|{message}|{timestamp}".encode()).hexdigest()
    return EmergencyAlert(
        id=f"alert-{digest[:16]}",
        severity=severity,
        type=alert_type,
        message=message,
        timestamp=timestamp,
        action_required=severity in ("CRITICAL", "URGENT"),
        suggested_actions=suggested_actions,
    )


def detect_vital_alerts(
    bundle: PatientBundle,
    config: AnalyticsConfiguration,
    now: datetime,
) -> list[EmergencyAlert]:
    """Critical-bound checks against the latest reading."""
    latest = bundle.latest
    if latest is None:
        return []

    t = config.risk_thresholds
    alerts: list[EmergencyAlert] = []

    systolic, diastolic = latest.bp_systolic, latest.bp_diastolic
    if (systolic is not None and systolic > t.blood_pressure.systolic.critical) or (
        diastolic is not None and diastolic > t.blood_pressure.diastolic.critical
    ):
        alerts.append(create_alert(
            "CRITICAL",
            "VITAL_ANOMALY",
            "Critical blood pressure reading detected",
            ["Contact emergency services", "Notify primary physician", "Alert emergency contact"],
            now,
        ))

    hr = latest.heart_rate
    if hr is not None and (hr > t.heart_rate.critical or hr < t.heart_rate.low):
        alerts.append(create_alert(
            "CRITICAL",
            "VITAL_ANOMALY",
            "Critical heart rate detected",
            ["Immediate medical attention required", "Contact emergency services"],
            now,
        ))

    oxygen = latest.oxygen_saturation
    if oxygen is not None and oxygen < t.oxygen_saturation.critical:
        alerts.append(create_alert(
            "CRITICAL",
            "VITAL_ANOMALY",
            "Critical oxygen saturation level",
            ["Immediate oxygen therapy may be needed", "Contact emergency services"],
            now,
        ))

    return alerts


def detect_missed_check_ins(
    bundle: PatientBundle,
    config: AnalyticsConfiguration,
    now: datetime,
) -> list[EmergencyAlert]:
    """WARNING once elapsed days strictly exceed the configured threshold."""
    actions = ["Contact patient", "Check on patient welfare", "Review care plan"]
    elapsed = days_since_last_check_in(bundle.check_ins, now)
    if elapsed is None:
        return [create_alert("WARNING", "MISSED_CHECKINS", "No check-ins on record", actions, now)]
    if elapsed > config.adherence_settings.missed_check_in_threshold:
        return [create_alert(
            "WARNING",
            "MISSED_CHECKINS",
            f"No check-in for {math.floor(elapsed)} days",
            actions,
            now,
        )]
    return []


def detect_emergency_flag(bundle: PatientBundle, now: datetime) -> list[EmergencyAlert]:
    latest = bundle.latest
    if latest is None or not latest.is_emergency:
        return []
    return [create_alert(
        "CRITICAL",
        "EMERGENCY_CONTACT",
        "Patient has indicated emergency status",
        [
            "Contact emergency services immediately",
            "Notify emergency contact",
            "Initiate emergency protocol",
        ],
        now,
    )]


def detect_alerts(
    bundle: PatientBundle,
    config: AnalyticsConfiguration,
    now: datetime,
) -> list[EmergencyAlert]:
    """All real-time alerts: vitals, missed check-ins, then the emergency flag."""
    alerts = [
        *detect_vital_alerts(bundle, config, now),
        *detect_missed_check_ins(bundle, config, now),
        *detect_emergency_flag(bundle, now),
    ]
    if alerts:
        logger.debug("Detected %d alert(s) for patient %s", len(alerts), bundle.patient_id or "<unknown>")
    return alerts


def risk_escalation_alerts(
    assessment: RiskAssessment,
    settings: AlertSettings,
    now: datetime,
) -> list[EmergencyAlert]:
    """URGENT escalation for a CRITICAL assessment when predictive alerts are on."""
    if not settings.enable_predictive_alerts or assessment.risk_level != "CRITICAL":
        return []
    return [create_alert(
        "URGENT",
        "RISK_ESCALATION",
        f"Risk score escalated to {assessment.risk_score} (CRITICAL)",
        ["Schedule urgent clinical review", "Notify care team"],
        now,
    )]


def suppress_recent_alerts(
    alerts: Iterable[EmergencyAlert],
    history: Iterable[EmergencyAlert],
    now: datetime,
    cooldown_hours: float,
) -> list[EmergencyAlert]:
    """Drop alerts whose (type, message) already fired within the cooldown."""
    window_start = now - timedelta(hours=cooldown_hours)
    recent = set()
    for previous in history:
        raised = parse_timestamp(previous.timestamp)
        if raised is not None and window_start <= raised <= now:
            recent.add((previous.type, previous.message))
    return [a for a in alerts if (a.type, a.message) not in recent]


def needs_emergency_contact(
    alert: EmergencyAlert,
    now: datetime,
    threshold_hours: float,
) -> bool:
    """True for an action-required alert left open past the escalation threshold."""
    if not alert.action_required:
        return False
    raised = parse_timestamp(alert.timestamp)
    if raised is None:
        return False
    return now - raised >= timedelta(hours=threshold_hours)
