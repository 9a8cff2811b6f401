"""Tests for real-time alert detection, escalation and suppression."""

from __future__ import annotations

from datetime import timedelta

import pytest

from riskwatch.domains.health.domain_logic.alerts import (
    create_alert,
    detect_alerts,
    needs_emergency_contact,
    risk_escalation_alerts,
    suppress_recent_alerts,
)
from riskwatch.domains.health.domain_logic.configuration import default_configuration
from riskwatch.domains.health.domain_logic.models import RiskAssessment
from riskwatch.domains.health.domain_logic.readings import parse_bundle


@pytest.fixture
def bundle_with(make_reading, make_check_ins):
    """Bundle with one reading taken now and a check-in today."""
    def _make(**fields):
        return parse_bundle({"vitals": [make_reading(0, **fields)], "checkIns": make_check_ins(0)})
    return _make


def _assessment(level: str, score: int) -> RiskAssessment:
    return RiskAssessment(
        risk_level=level,
        risk_score=score,
        risk_factors=[],
        recommendations=[],
        priority=5,
        last_assessed="2026-03-15T12:00:00+00:00",
        trend_direction="STABLE",
    )


class TestEmergencyFlag:
    def test_flag_alone_raises_one_emergency_contact_alert(self, bundle_with, config, now):
        alerts = detect_alerts(bundle_with(is_emergency=True), config, now)
        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.severity == "CRITICAL"
        assert alert.type == "EMERGENCY_CONTACT"
        assert alert.action_required is True
        assert alert.message == "Patient has indicated emergency status"

    def test_flag_on_older_reading_is_ignored(self, make_reading, make_check_ins, config, now):
        bundle = parse_bundle({
            "vitals": [make_reading(0, heart_rate=70), make_reading(1, is_emergency=True)],
            "checkIns": make_check_ins(0),
        })
        assert detect_alerts(bundle, config, now) == []


class TestVitalAlerts:
    @pytest.mark.parametrize("fields, message", [
        ({"bp_systolic": 181}, "Critical blood pressure reading detected"),
        ({"bp_diastolic": 121}, "Critical blood pressure reading detected"),
        ({"heart_rate": 121}, "Critical heart rate detected"),
        ({"heart_rate": 49}, "Critical heart rate detected"),
        ({"spo2": 87}, "Critical oxygen saturation level"),
        ({"blood_oxygen": 87}, "Critical oxygen saturation level"),
    ])
    def test_critical_values(self, bundle_with, config, now, fields, message):
        alerts = detect_alerts(bundle_with(**fields), config, now)
        assert [a.message for a in alerts] == [message]
        assert alerts[0].severity == "CRITICAL"
        assert alerts[0].type == "VITAL_ANOMALY"

    @pytest.mark.parametrize("fields", [
        {"bp_systolic": 180, "bp_diastolic": 120},
        {"heart_rate": 120},
        {"heart_rate": 50},
        {"pulse_oximeter": 88},
    ])
    def test_bounds_are_strict(self, bundle_with, config, now, fields):
        assert detect_alerts(bundle_with(**fields), config, now) == []

    def test_alert_order(self, bundle_with, config, now):
        alerts = detect_alerts(
            bundle_with(bp_systolic=200, heart_rate=150, spo2=80, is_emergency=True), config, now
        )
        assert [a.message for a in alerts] == [
            "Critical blood pressure reading detected",
            "Critical heart rate detected",
            "Critical oxygen saturation level",
            "Patient has indicated emergency status",
        ]


class TestMissedCheckIns:
    def test_no_history(self, make_reading, config, now):
        bundle = parse_bundle({"vitals": [make_reading(0, heart_rate=70)], "checkIns": []})
        alerts = detect_alerts(bundle, config, now)
        assert [(a.type, a.message) for a in alerts] == [("MISSED_CHECKINS", "No check-ins on record")]
        assert alerts[0].severity == "WARNING"
        assert alerts[0].action_required is False

    def test_exactly_at_threshold_does_not_fire(self, make_check_ins, config, now):
        bundle = parse_bundle({"checkIns": make_check_ins(3)})
        assert detect_alerts(bundle, config, now) == []

    def test_past_threshold_fires(self, make_check_ins, config, now):
        bundle = parse_bundle({"checkIns": make_check_ins(3 + 1 / 24)})
        alerts = detect_alerts(bundle, config, now)
        assert [a.message for a in alerts] == ["No check-in for 3 days"]

    @pytest.mark.parametrize(("latest_days_ago", "fires"), [(3, False), (3 + 1 / 24, True), (10, True)])
    def test_two_check_ins_ten_days_apart_with_default_threshold(self, make_check_ins, now, latest_days_ago, fires):
        config = default_configuration()
        assert config.adherence_settings.missed_check_in_threshold == 3
        bundle = parse_bundle({"checkIns": make_check_ins(latest_days_ago + 10, latest_days_ago)})
        alerts = [a for a in detect_alerts(bundle, config, now) if a.type == "MISSED_CHECKINS"]
        assert bool(alerts) is fires

    def test_threshold_is_configurable(self, make_check_ins, config, now):
        config.adherence_settings.missed_check_in_threshold = 5
        bundle = parse_bundle({"checkIns": make_check_ins(4)})
        assert detect_alerts(bundle, config, now) == []


class TestCreateAlert:
    def test_id_is_deterministic(self, now):
        a = create_alert("WARNING", "MISSED_CHECKINS", "msg", [], now)
        b = create_alert("WARNING", "MISSED_CHECKINS", "msg", [], now)
        assert a.id == b.id
        assert a.id.startswith("alert-")
        assert len(a.id) == len("alert-") + 16

    def test_id_differs_by_content(self, now):
        a = create_alert("WARNING", "MISSED_CHECKINS", "one", [], now)
        b = create_alert("WARNING", "MISSED_CHECKINS", "two", [], now)
        assert a.id != b.id

    def test_action_required_by_severity(self, now):
        assert create_alert("URGENT", "RISK_ESCALATION", "m", [], now).action_required is True
        assert create_alert("WARNING", "MISSED_CHECKINS", "m", [], now).action_required is False


class TestRiskEscalation:
    def test_critical_assessment_escalates(self, config, now):
        alerts = risk_escalation_alerts(_assessment("CRITICAL", 92), config.alert_settings, now)
        assert len(alerts) == 1
        assert alerts[0].severity == "URGENT"
        assert alerts[0].type == "RISK_ESCALATION"
        assert "92" in alerts[0].message

    def test_high_assessment_does_not_escalate(self, config, now):
        assert risk_escalation_alerts(_assessment("HIGH", 70), config.alert_settings, now) == []

    def test_disabled_predictive_alerts(self, config, now):
        config.alert_settings.enable_predictive_alerts = False
        assert risk_escalation_alerts(_assessment("CRITICAL", 92), config.alert_settings, now) == []


class TestSuppressionAndEscalation:
    def test_recent_duplicate_is_suppressed(self, now):
        earlier = create_alert("CRITICAL", "VITAL_ANOMALY", "Critical heart rate detected", [], now - timedelta(hours=2))
        fresh = create_alert("CRITICAL", "VITAL_ANOMALY", "Critical heart rate detected", [], now)
        assert suppress_recent_alerts([fresh], [earlier], now, cooldown_hours=4) == []

    def test_duplicate_outside_cooldown_is_kept(self, now):
        earlier = create_alert("CRITICAL", "VITAL_ANOMALY", "Critical heart rate detected", [], now - timedelta(hours=5))
        fresh = create_alert("CRITICAL", "VITAL_ANOMALY", "Critical heart rate detected", [], now)
        assert suppress_recent_alerts([fresh], [earlier], now, cooldown_hours=4) == [fresh]

    def test_different_alert_is_kept(self, now):
        earlier = create_alert("CRITICAL", "VITAL_ANOMALY", "Critical heart rate detected", [], now - timedelta(hours=1))
        fresh = create_alert("CRITICAL", "VITAL_ANOMALY", "Critical oxygen saturation level", [], now)
        assert suppress_recent_alerts([fresh], [earlier], now, cooldown_hours=4) == [fresh]

    def test_emergency_contact_after_threshold(self, now):
        alert = create_alert("CRITICAL", "VITAL_ANOMALY", "m", [], now - timedelta(hours=2))
        assert needs_emergency_contact(alert, now, threshold_hours=1) is True

    def test_no_emergency_contact_before_threshold(self, now):
        alert = create_alert("CRITICAL", "VITAL_ANOMALY", "m", [], now - timedelta(minutes=30))
        assert needs_emergency_contact(alert, now, threshold_hours=1) is False

    def test_warnings_never_need_emergency_contact(self, now):
        alert = create_alert("WARNING", "MISSED_CHECKINS", "m", [], now - timedelta(hours=10))
        assert needs_emergency_contact(alert, now, threshold_hours=1) is False
