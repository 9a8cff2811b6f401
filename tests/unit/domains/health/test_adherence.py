"""Tests for check-in adherence risk and the adherence score."""

from __future__ import annotations

import pytest

from riskwatch.domains.health.domain_logic.adherence import (
    assess_adherence_risk,
    calculate_adherence_score,
    check_in_gaps,
    days_since_last_check_in,
)
from riskwatch.domains.health.domain_logic.readings import parse_check_in


@pytest.fixture
def check_ins(make_check_ins):
    def _make(*days_ago):
        return [parse_check_in(c) for c in make_check_ins(*days_ago)]
    return _make


@pytest.fixture
def settings(config):
    return config.adherence_settings


class TestAssessAdherenceRisk:
    def test_no_history(self, now, settings):
        result = assess_adherence_risk([], now, settings)
        assert result.score == 20
        assert result.factors == ["No check-in history available"]

    def test_full_adherence(self, now, settings, check_ins):
        result = assess_adherence_risk(check_ins(*range(30)), now, settings)
        assert result.score == 0
        assert result.factors == []

    def test_very_low_adherence(self, now, settings, check_ins):
        result = assess_adherence_risk(check_ins(*range(5)), now, settings)
        assert result.score == 15
        assert result.factors == ["Very low check-in adherence"]

    def test_low_adherence(self, now, settings, check_ins):
        result = assess_adherence_risk(check_ins(*range(12)), now, settings)
        assert result.score == 8
        assert result.factors == ["Low check-in adherence"]

    def test_long_gap_since_last_check_in(self, now, settings, check_ins):
        # 20 of the 30 check-ins fall inside the window: 66.7%, no rate penalty
        result = assess_adherence_risk(check_ins(*range(10, 40)), now, settings)
        assert result.score == 10
        assert result.factors == ["10 days since last check-in"]

    def test_rate_and_gap_are_additive(self, now, settings, check_ins):
        result = assess_adherence_risk(check_ins(8, 9), now, settings)
        assert result.score == 25
        assert result.factors == ["Very low check-in adherence", "8 days since last check-in"]

    def test_undated_check_ins_count_as_history(self, now, settings):
        result = assess_adherence_risk([parse_check_in({})], now, settings)
        assert result.factors == ["Very low check-in adherence"]


class TestAdherenceScore:
    def test_no_check_ins(self, now):
        assert calculate_adherence_score([], now) == 0

    def test_daily_check_ins(self, now, check_ins):
        assert calculate_adherence_score(check_ins(*range(30)), now) == 100

    def test_capped_at_100(self, now, check_ins):
        assert calculate_adherence_score(check_ins(*[d / 2 for d in range(60)]), now) == 100

    def test_gap_penalty(self, now, check_ins):
        # 16 recent check-ins (53.3%) and one 6-day gap
        assert calculate_adherence_score(check_ins(*range(15), 20), now) == 48

    def test_floored_at_zero(self, now, check_ins):
        assert calculate_adherence_score(check_ins(0, 5, 10), now) == 0

    def test_old_check_ins_ignored(self, now, check_ins):
        assert calculate_adherence_score(check_ins(45, 50), now) == 0


class TestHelpers:
    def test_check_in_gaps(self, check_ins):
        assert check_in_gaps(check_ins(0, 2, 7)) == pytest.approx([2.0, 5.0])

    def test_days_since_last_uses_latest(self, now, check_ins):
        assert days_since_last_check_in(check_ins(5, 2, 9), now) == pytest.approx(2.0)

    def test_days_since_last_without_dates(self, now):
        assert days_since_last_check_in([parse_check_in({})], now) is None
