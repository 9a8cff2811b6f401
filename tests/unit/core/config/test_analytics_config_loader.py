"""Tests for the YAML analytics configuration loader and server settings."""

from __future__ import annotations

import pytest

from riskwatch.core.config.loader import dump_configuration, load_configuration_file
from riskwatch.core.config.settings import get_settings
from riskwatch.domains.health.domain_logic.configuration import (
    AnalyticsConfiguration,
    ConfigurationError,
)


class TestLoadConfigurationFile:
    def test_partial_overrides_merge_over_defaults(self, tmp_path):
        path = tmp_path / "analytics.yaml"
        path.write_text(
            "risk_thresholds:\n"
            "  heart_rate:\n"
            "    critical: 130\n"
            "alert_settings:\n"
            "  enable_predictive_alerts: false\n"
        )
        config = load_configuration_file(path)
        assert config.risk_thresholds.heart_rate.critical == 130
        assert config.risk_thresholds.heart_rate.high == 100
        assert config.alert_settings.enable_predictive_alerts is False

    def test_empty_file_yields_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_configuration_file(path) == AnalyticsConfiguration()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="cannot read"):
            load_configuration_file(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("risk_thresholds: [unclosed\n")
        with pytest.raises(ConfigurationError, match="invalid YAML"):
            load_configuration_file(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_configuration_file(path)

    def test_unknown_keys_rejected(self, tmp_path):
        path = tmp_path / "typo.yaml"
        path.write_text("adherence_settings:\n  missed_checkin_threshold: 5\n")
        with pytest.raises(ConfigurationError):
            load_configuration_file(path)

    def test_dump_round_trips(self, tmp_path):
        config = AnalyticsConfiguration()
        config.trend_settings.stable_band_percent = 7.5
        path = tmp_path / "dumped.yaml"
        path.write_text(dump_configuration(config))
        assert load_configuration_file(path) == config


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("RISKWATCH_PORT", raising=False)
        settings = get_settings()
        assert settings.riskwatch_host == "127.0.0.1"
        assert settings.riskwatch_port == 8011
        assert settings.riskwatch_allow_insecure_bind is False
        assert settings.analytics_config_path == ""

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("RISKWATCH_PORT", "9100")
        monkeypatch.setenv("MOCK_COHORT_SIZE", "3")
        settings = get_settings()
        assert settings.riskwatch_port == 9100
        assert settings.mock_cohort_size == 3
