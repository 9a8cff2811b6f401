"""Value objects produced by the health-risk analytics engine.

Every entity here is created fresh on each computation call. ``as_dict()``
returns a plain JSON-serialisable dict for the MCP tools and other callers.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Literal

RiskLevel = Literal["LOW", "MODERATE", "HIGH", "CRITICAL"]
TrendDirection = Literal["IMPROVING", "STABLE", "DECLINING"]
Trend = Literal["RISING", "FALLING", "STABLE"]
AlertSeverity = Literal["WARNING", "URGENT", "CRITICAL"]
AlertType = Literal["VITAL_ANOMALY", "MISSED_CHECKINS", "RISK_ESCALATION", "EMERGENCY_CONTACT"]
ConfidenceLevel = Literal["LOW", "MEDIUM", "HIGH"]
CareCategory = Literal["MEDICATION", "LIFESTYLE", "MONITORING", "FOLLOW_UP", "INTERVENTION"]
CarePriority = Literal["LOW", "MEDIUM", "HIGH", "URGENT"]
VitalMetric = Literal["bp_systolic", "bp_diastolic", "heart_rate", "glucose_mg_dl", "pulse_oximeter"]

VITAL_METRICS: list[VitalMetric] = [
    "bp_systolic",
    "bp_diastolic",
    "heart_rate",
    "glucose_mg_dl",
    "pulse_oximeter",
]


class _Serializable:
    def as_dict(self) -> dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]


# ---------------------------------------------------------------------------
# Canonical inputs
# ---------------------------------------------------------------------------

@dataclass
class VitalReading(_Serializable):
    """A single timestamped reading with every alias already resolved."""

    created_at: datetime | None = None
    bp_systolic: float | None = None
    bp_diastolic: float | None = None
    heart_rate: float | None = None
    glucose: float | None = None            # glucose_mg_dl | blood_sugar
    oxygen_saturation: float | None = None  # pulse_oximeter | spo2 | blood_oxygen
    weight: float | None = None
    mood: str | None = None
    physical_activity: str | None = None
    social_engagement: str | None = None
    symptoms: str | None = None
    activity_description: str | None = None
    is_emergency: bool = False

    def value_for(self, metric: VitalMetric) -> float | None:
        """Return the measured value for a trend metric, or None."""
        return {
            "bp_systolic": self.bp_systolic,
            "bp_diastolic": self.bp_diastolic,
            "heart_rate": self.heart_rate,
            "glucose_mg_dl": self.glucose,
            "pulse_oximeter": self.oxygen_saturation,
        }[metric]

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat() if self.created_at else None
        return data


@dataclass
class CheckInRecord(_Serializable):
    """A check-in; its presence alone counts toward adherence."""

    created_at: datetime | None = None


@dataclass
class PatientBundle:
    """Per-patient input as handed over by the data-fetch collaborator."""

    patient_id: str = ""
    profile: dict[str, Any] = field(default_factory=dict)
    vitals: list[VitalReading] = field(default_factory=list)      # most recent first
    check_ins: list[CheckInRecord] = field(default_factory=list)  # most recent first

    @property
    def latest(self) -> VitalReading | None:
        return self.vitals[0] if self.vitals else None

    @property
    def patient_name(self) -> str:
        first = self.profile.get("first_name") or ""
        last = self.profile.get("last_name") or ""
        return f"{first} {last}".strip()


# ---------------------------------------------------------------------------
# Risk assessment
# ---------------------------------------------------------------------------

@dataclass
class ScoreResult(_Serializable):
    """Contribution of one scorer to the overall risk score."""

    score: int = 0
    factors: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


@dataclass
class RiskAssessment(_Serializable):
    risk_level: RiskLevel
    risk_score: int
    risk_factors: list[str]
    recommendations: list[str]
    priority: int
    last_assessed: str
    trend_direction: TrendDirection


@dataclass
class NormalRange(_Serializable):
    min: float
    max: float


@dataclass
class VitalsTrend(_Serializable):
    metric: VitalMetric
    current: float
    previous: float
    trend: Trend
    change_percent: float
    is_abnormal: bool
    normal_range: NormalRange
    recommendation: str | None = None


@dataclass
class EmergencyAlert(_Serializable):
    id: str
    severity: AlertSeverity
    type: AlertType
    message: str
    timestamp: str
    action_required: bool
    suggested_actions: list[str] = field(default_factory=list)


@dataclass
class PredictedOutcome(_Serializable):
    condition: str
    probability: int
    timeframe: str
    confidence_level: ConfidenceLevel
    based_on: list[str] = field(default_factory=list)


@dataclass
class CareRecommendation(_Serializable):
    category: CareCategory
    priority: CarePriority
    recommendation: str
    reasoning: str
    estimated_impact: str
    timeline: str


@dataclass
class PatientInsight(_Serializable):
    patient_id: str
    patient_name: str
    overall_health_score: int
    risk_assessment: RiskAssessment
    vitals_trends: list[VitalsTrend]
    adherence_score: int
    last_check_in: str
    emergency_alerts: list[EmergencyAlert]
    predicted_outcomes: list[PredictedOutcome]
    care_recommendations: list[CareRecommendation]


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

@dataclass
class BloodPressureAggregate(_Serializable):
    systolic: int | None = None
    diastolic: int | None = None
    count: int = 0


@dataclass
class RangeAggregate(_Serializable):
    avg: int | None = None
    min: float | None = None
    max: float | None = None
    count: int = 0


@dataclass
class WeightAggregate(_Serializable):
    avg: float | None = None
    count: int = 0


@dataclass
class MoodAggregate(_Serializable):
    predominant: str | None = None
    entries: list[str] = field(default_factory=list)


@dataclass
class EntriesAggregate(_Serializable):
    entries: list[str] = field(default_factory=list)


@dataclass
class DailyAggregates(_Serializable):
    blood_pressure: BloodPressureAggregate = field(default_factory=BloodPressureAggregate)
    heart_rate: RangeAggregate = field(default_factory=RangeAggregate)
    blood_sugar: RangeAggregate = field(default_factory=RangeAggregate)
    blood_oxygen: RangeAggregate = field(default_factory=RangeAggregate)
    weight: WeightAggregate = field(default_factory=WeightAggregate)
    mood: MoodAggregate = field(default_factory=MoodAggregate)
    physical_activity: EntriesAggregate = field(default_factory=EntriesAggregate)
    social_engagement: EntriesAggregate = field(default_factory=EntriesAggregate)
    symptoms: EntriesAggregate = field(default_factory=EntriesAggregate)


@dataclass
class DailyHealthLog:
    date: str  # YYYY-MM-DD
    readings: list[VitalReading] = field(default_factory=list)
    aggregates: DailyAggregates = field(default_factory=DailyAggregates)

    def as_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "readings": [r.as_dict() for r in self.readings],
            "aggregates": self.aggregates.as_dict(),
        }


@dataclass
class WeeklyTrends(_Serializable):
    blood_pressure: Trend = "STABLE"
    heart_rate: Trend = "STABLE"
    blood_sugar: Trend = "STABLE"
    blood_oxygen: Trend = "STABLE"
    weight: Trend = "STABLE"
    mood: Trend = "STABLE"


@dataclass
class WeeklyHealthSummary(_Serializable):
    week_start: str
    week_end: str
    days_with_data: int
    total_readings: int
    aggregates: DailyAggregates
    trends: WeeklyTrends


@dataclass
class OverallStatistics(_Serializable):
    total_readings: int
    date_range: dict[str, str | None]
    averages: DailyAggregates
    compliance_rate: int


@dataclass
class HealthStatistics:
    daily_logs: list[DailyHealthLog]
    weekly_averages: list[WeeklyHealthSummary]
    overall_stats: OverallStatistics
    last_updated: str
    data_points: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "daily_logs": [log.as_dict() for log in self.daily_logs],
            "weekly_averages": [week.as_dict() for week in self.weekly_averages],
            "overall_stats": self.overall_stats.as_dict(),
            "last_updated": self.last_updated,
            "data_points": self.data_points,
        }


# ---------------------------------------------------------------------------
# Population
# ---------------------------------------------------------------------------

@dataclass
class ConditionPrevalence(_Serializable):
    condition: str
    prevalence: int  # percent of cohort


@dataclass
class PopulationRecommendation(_Serializable):
    type: Literal["RESOURCE_ALLOCATION", "INTERVENTION_PROGRAM", "POLICY_CHANGE", "TRAINING"]
    recommendation: str
    expected_impact: str
    implementation_effort: Literal["LOW", "MEDIUM", "HIGH"]
    priority: int


@dataclass
class PopulationPrediction(_Serializable):
    metric: str
    prediction: str
    timeframe: str
    confidence: int
    factors_influencing: list[str] = field(default_factory=list)


@dataclass
class PopulationMetrics(_Serializable):
    average_age: int
    risk_distribution: dict[str, int]
    common_conditions: list[ConditionPrevalence]
    adherence_rate: int


@dataclass
class PopulationInsights(_Serializable):
    total_patients: int
    active_patients: int
    high_risk_patients: int
    average_health_score: int
    trending_concerns: list[str]
    population_metrics: PopulationMetrics
    recommendations: list[PopulationRecommendation]
    predictive_analytics: list[PopulationPrediction]


@dataclass
class RiskMatrixCell(_Serializable):
    quadrant: str
    patient_count: int
    recommended_action: str
    urgency: Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]


@dataclass
class RiskMatrix(_Serializable):
    quadrants: dict[str, int]
    action_priority: list[RiskMatrixCell]


@dataclass
class InterventionItem(_Serializable):
    patient_id: str
    patient_name: str
    intervention_type: CareCategory
    priority: int
    description: str
    estimated_time_to_complete: str
    expected_outcome: str
    due_date: str
