"""Tests for clinician-facing summaries, review dates and the intervention queue."""

from __future__ import annotations

import pytest

from riskwatch.domains.health.domain_logic.readings import parse_bundle
from riskwatch.domains.health.domain_logic.reporting import (
    build_intervention_queue,
    calculate_due_date,
    calculate_next_review_date,
    generate_clinical_summary,
    generate_recommended_actions,
)


@pytest.fixture
def healthy_insight(engine, healthy_bundle):
    return engine.generate_patient_insights("p-healthy", healthy_bundle)


@pytest.fixture
def critical_insight(engine, critical_bundle):
    return engine.generate_patient_insights("p-critical", critical_bundle)


class TestClinicalSummary:
    def test_contains_scores_and_findings(self, critical_insight):
        summary = generate_clinical_summary(critical_insight)
        lines = summary.splitlines()
        assert lines[0] == "Patient: Bola Reyes"
        assert "Overall Health Score: 0/100" in lines
        assert "Risk Level: CRITICAL" in lines
        assert "Adherence Score: 0%" in lines
        assert "• Hypertensive crisis - critical blood pressure" in lines
        assert lines[-1] == "Last Assessment: 2026-03-15"

    def test_at_most_three_recommendations(self, critical_insight):
        summary = generate_clinical_summary(critical_insight)
        recs = summary.split("Recommendations:\n", 1)[1].split("\n\n", 1)[0]
        assert 0 < len(recs.splitlines()) <= 3


class TestRecommendedActions:
    def test_emergency_actions_first_without_duplicates(self, critical_insight):
        actions = generate_recommended_actions(critical_insight)
        assert actions[0] == "Contact emergency services"
        assert actions.count("Contact emergency services") == 1
        assert "Immediate clinical assessment and intervention required" in actions
        assert actions[-2:] == [
            "Implement adherence improvement strategies",
            "Schedule comprehensive health assessment",
        ]

    def test_nothing_to_do_for_healthy_patient(self, healthy_insight):
        assert generate_recommended_actions(healthy_insight) == []


class TestReviewDates:
    def test_low_risk_reviewed_monthly(self, healthy_insight, now):
        assert calculate_next_review_date(healthy_insight, now) == "2026-04-14T12:00:00+00:00"

    def test_critical_reviewed_next_day(self, critical_insight, now):
        assert calculate_next_review_date(critical_insight, now) == "2026-03-16T12:00:00+00:00"

    @pytest.mark.parametrize("priority, timeline, due", [
        ("URGENT", "Within 48 hours", "2026-03-16T12:00:00+00:00"),
        ("MEDIUM", "Within 24 hours", "2026-03-16T12:00:00+00:00"),
        ("HIGH", "Within 1 week", "2026-03-18T12:00:00+00:00"),
        ("LOW", "Within 1 month", "2026-04-14T12:00:00+00:00"),
        ("MEDIUM", "Start within 2 weeks", "2026-03-22T12:00:00+00:00"),
    ])
    def test_due_dates(self, now, priority, timeline, due):
        assert calculate_due_date(priority, timeline, now) == due


class TestInterventionQueue:
    def test_sorted_by_priority(self, engine, healthy_bundle, critical_bundle, disengaged_bundle, now):
        insights = [
            engine.generate_patient_insights(b["profile"]["user_id"], b)
            for b in (healthy_bundle, disengaged_bundle, critical_bundle)
        ]
        queue = build_intervention_queue(insights, now)
        assert [item.priority for item in queue] == [5, 5, 4]
        assert [item.patient_id for item in queue] == ["p-critical", "p-critical", "p-disengaged"]
        assert queue[0].intervention_type == "INTERVENTION"
        assert queue[2].due_date == "2026-03-18T12:00:00+00:00"

    def test_limit(self, engine, critical_bundle, now):
        insight = engine.generate_patient_insights("p-critical", parse_bundle(critical_bundle))
        assert len(build_intervention_queue([insight], now, limit=1)) == 1
