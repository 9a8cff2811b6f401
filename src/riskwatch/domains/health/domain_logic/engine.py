"""Health analytics engine — the public entry point for in-process callers.

The engine owns only the current AnalyticsConfiguration and a clock. Every
call reads the configuration afresh and returns newly built value objects;
patient data is never retained.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from riskwatch.domains.health.domain_logic import aggregation, alerts, population, reporting
from riskwatch.domains.health.domain_logic.adherence import calculate_adherence_score
from riskwatch.domains.health.domain_logic.care_recommendations import (
    generate_care_recommendations,
)
from riskwatch.domains.health.domain_logic.configuration import (
    AnalyticsConfiguration,
    ConfigurationError,
    default_configuration,
    merge_configuration,
)
from riskwatch.domains.health.domain_logic.models import (
    DailyHealthLog,
    EmergencyAlert,
    HealthStatistics,
    InterventionItem,
    PatientBundle,
    PatientInsight,
    PopulationInsights,
    RiskAssessment,
    RiskMatrix,
    VitalReading,
    VitalsTrend,
    WeeklyHealthSummary,
)
from riskwatch.domains.health.domain_logic.predictions import generate_predicted_outcomes
from riskwatch.domains.health.domain_logic.readings import (
    parse_bundle,
    parse_reading,
    parse_readings,
    sanitize_reading,
    validate_and_clean,
)
from riskwatch.domains.health.domain_logic.risk_assessment import assess_patient_risk
from riskwatch.domains.health.domain_logic.trend_analyzer import TrendAnalyzer

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
BundleInput = Mapping[str, Any] | PatientBundle
ReadingInput = Mapping[str, Any] | VitalReading


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def calculate_vitals_health_score(vitals_trends: Sequence[VitalsTrend]) -> float:
    """Share of measured vitals inside their normal range (50 with none)."""
    if not vitals_trends:
        return 50.0
    normal = sum(1 for t in vitals_trends if not t.is_abnormal)
    return normal / len(vitals_trends) * 100


def calculate_overall_health_score(
    assessment: RiskAssessment,
    adherence_score: int,
    vitals_trends: Sequence[VitalsTrend],
) -> int:
    """50% inverted risk, 30% adherence, 20% vitals in range."""
    return aggregation.round_half_up(
        (100 - assessment.risk_score) * 0.5
        + adherence_score * 0.3
        + calculate_vitals_health_score(vitals_trends) * 0.2
    )


class HealthAnalyticsEngine:
    """Computes patient risk, insights, statistics and population analytics.

    Usage::

        engine = HealthAnalyticsEngine()
        insight = engine.generate_patient_insights("p-1", {"vitals": [...], "checkIns": [...]})
        engine.update_configuration({"adherence_settings": {"missed_check_in_threshold": 5}})
    """

    def __init__(
        self,
        config: AnalyticsConfiguration | None = None,
        *,
        clock: Clock = utc_now,
    ) -> None:
        self._config = config if config is not None else default_configuration()
        self._clock = clock

    # --- Configuration -----------------------------------------------------

    def get_configuration(self) -> AnalyticsConfiguration:
        """Return a copy of the active configuration."""
        return self._config.model_copy(deep=True)

    def update_configuration(self, changes: Mapping[str, Any]) -> AnalyticsConfiguration:
        """Merge a partial nested mapping into the active configuration.

        Raises:
            ConfigurationError: the merged result has the wrong shape; the
                previous configuration stays active.
        """
        self._config = merge_configuration(self._config, changes)
        logger.info("Analytics configuration updated: %s", sorted(changes))
        return self.get_configuration()

    def replace_configuration(self, config: AnalyticsConfiguration) -> None:
        if not isinstance(config, AnalyticsConfiguration):
            raise ConfigurationError("expected an AnalyticsConfiguration")
        self._config = config.model_copy(deep=True)
        logger.info("Analytics configuration replaced")

    # --- Single patient ----------------------------------------------------

    def assess_patient_risk(self, bundle: BundleInput) -> RiskAssessment:
        return assess_patient_risk(parse_bundle(bundle), self._config, self._clock())

    def analyze_vitals_trends(self, bundle: BundleInput) -> list[VitalsTrend]:
        return TrendAnalyzer(self._config.trend_settings).analyze_vitals_trends(
            parse_bundle(bundle).vitals
        )

    def monitor_patient_in_real_time(self, bundle: BundleInput) -> list[EmergencyAlert]:
        return alerts.detect_alerts(parse_bundle(bundle), self._config, self._clock())

    def generate_patient_insights(self, patient_id: str, bundle: BundleInput) -> PatientInsight:
        config = self._config
        now = self._clock()
        patient = parse_bundle(bundle, patient_id=patient_id)

        assessment = assess_patient_risk(patient, config, now)
        trends = TrendAnalyzer(config.trend_settings).analyze_vitals_trends(patient.vitals)
        adherence = calculate_adherence_score(
            patient.check_ins, now, config.adherence_settings.adherence_window_days
        )
        patient_alerts = [
            *alerts.detect_alerts(patient, config, now),
            *alerts.risk_escalation_alerts(assessment, config.alert_settings, now),
        ]
        last_check_in = patient.check_ins[0].created_at if patient.check_ins else None

        return PatientInsight(
            patient_id=patient_id,
            patient_name=patient.patient_name,
            overall_health_score=calculate_overall_health_score(assessment, adherence, trends),
            risk_assessment=assessment,
            vitals_trends=trends,
            adherence_score=adherence,
            last_check_in=last_check_in.isoformat() if last_check_in else "Never",
            emergency_alerts=patient_alerts,
            predicted_outcomes=generate_predicted_outcomes(patient, assessment),
            care_recommendations=generate_care_recommendations(assessment, trends),
        )

    def suppress_recent_alerts(
        self,
        new_alerts: Iterable[EmergencyAlert],
        history: Iterable[EmergencyAlert],
    ) -> list[EmergencyAlert]:
        """Drop alerts already raised within the configured cooldown."""
        return alerts.suppress_recent_alerts(
            new_alerts, history, self._clock(), self._config.alert_settings.alert_cooldown_hours
        )

    def alerts_needing_emergency_contact(self, open_alerts: Iterable[EmergencyAlert]) -> list[EmergencyAlert]:
        threshold = self._config.alert_settings.emergency_contact_threshold_hours
        now = self._clock()
        return [a for a in open_alerts if alerts.needs_emergency_contact(a, now, threshold)]

    # --- Clinical reporting ------------------------------------------------

    def generate_clinical_summary(self, insight: PatientInsight) -> str:
        return reporting.generate_clinical_summary(insight)

    def generate_recommended_actions(self, insight: PatientInsight) -> list[str]:
        return reporting.generate_recommended_actions(insight)

    def calculate_next_review_date(self, insight: PatientInsight) -> str:
        return reporting.calculate_next_review_date(insight, self._clock())

    # --- Plausibility cleaning ---------------------------------------------

    def sanitize_reading(self, reading: ReadingInput) -> tuple[VitalReading, list[str]]:
        return sanitize_reading(parse_reading(reading))

    def validate_and_clean(self, readings: Iterable[ReadingInput]) -> tuple[list[VitalReading], list[str]]:
        """Opt-in: drop implausible values before aggregation."""
        return validate_and_clean(parse_readings(readings))

    # --- Aggregation -------------------------------------------------------

    def compute_daily_health_logs(self, readings: Iterable[ReadingInput]) -> dict[str, DailyHealthLog]:
        return aggregation.compute_daily_health_logs(parse_readings(readings))

    def compute_weekly_averages(self, daily_logs: Mapping[str, DailyHealthLog]) -> list[WeeklyHealthSummary]:
        return aggregation.compute_weekly_averages(
            daily_logs, self._config.trend_settings.stable_band_percent
        )

    def compute_health_statistics(self, readings: Iterable[ReadingInput]) -> HealthStatistics:
        return aggregation.compute_health_statistics(
            parse_readings(readings),
            self._clock(),
            self._config.trend_settings.stable_band_percent,
        )

    # --- Population --------------------------------------------------------

    def generate_population_insights(self, bundles: Iterable[BundleInput]) -> PopulationInsights:
        return population.generate_population_insights(
            [parse_bundle(b) for b in bundles], self._config, self._clock()
        )

    def build_risk_matrix(self, bundles: Iterable[BundleInput]) -> RiskMatrix:
        return population.build_risk_matrix(self._cohort_insights(bundles))

    def build_intervention_queue(self, bundles: Iterable[BundleInput]) -> list[InterventionItem]:
        return reporting.build_intervention_queue(self._cohort_insights(bundles), self._clock())

    def _cohort_insights(self, bundles: Iterable[BundleInput]) -> list[PatientInsight]:
        parsed = [parse_bundle(b) for b in bundles]
        return [self.generate_patient_insights(p.patient_id, p) for p in parsed]
