"""Core Data Models - Pydantic models for type safety.

All models are immutable value objects with no behavior beyond validation.
Raw records are read-only inputs; result models are derived by the core.
"""

from datetime import datetime
from datetime import date as DateType
from types import MappingProxyType
from typing import Literal, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator


MealTypeTag = Literal["breakfast", "lunch", "dinner", "snack"]
BloatingLevel = Literal["None", "Mild", "Moderate", "Severe"]
Confidence = Literal["low", "medium", "high"]
Impact = Literal["positive", "negative", "neutral"]
Trend = Literal["improving", "declining", "stable"]
AnalysisKind = Literal["working", "training"]
HydrationBucket = Literal["low", "moderate", "good", "excellent"]
InsightType = Literal["positive", "negative", "neutral", "suggestion"]
InsightCategory = Literal["mood", "productivity", "food", "streak", "general"]
AlertType = Literal["mood_decrease", "mood_increase", "streak_break"]
Severity = Literal["low", "medium", "high"]


# ==================== Configuration ====================


class ScoringConfig(BaseModel):
    """Scoring tables used by the normalizer.

    Passed explicitly into every analysis so that several scale
    configurations can coexist.
    """

    model_config = ConfigDict(frozen=True)

    mood_labels: Mapping[str, float] = Field(
        default_factory=lambda: {
            "sad": -1.0,
            "neutral": -0.5,
            "happy": 0.0,
            "very happy": 0.5,
            "ecstatic": 1.0,
        },
        description="Lower-cased mood label to signed score",
        validate_default=True,
    )
    mood_numbers: Mapping[int, float] = Field(
        default_factory=lambda: {1: -1.0, 2: -0.5, 3: 0.0, 4: 0.5, 5: 1.0},
        description="1-5 numeric mood to signed score",
        validate_default=True,
    )
    bloating_levels: Mapping[str, int] = Field(
        default_factory=lambda: {"none": 0, "mild": 1, "moderate": 2, "severe": 3},
        validate_default=True,
    )
    productivity_scale_max: int = Field(default=5, ge=2, description="Top of the productivity scale")
    timezone: str = Field(
        default="UTC",
        description="IANA zone used to turn report timestamps into calendar dates",
    )

    @field_validator("mood_labels", "mood_numbers", "bloating_levels", mode="after")
    @classmethod
    def _read_only(cls, table: Mapping) -> Mapping:
        return MappingProxyType(dict(table))

    @field_validator("timezone")
    @classmethod
    def _known_zone(cls, name: str) -> str:
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {name}") from e
        return name

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


# ==================== Raw Records ====================


class MoodRecord(BaseModel):
    """A day's mood rating. One per date."""

    log_date: DateType = Field(description="Date of the rating (YYYY-MM-DD)")
    mood: str | int = Field(description="Mood label or 1-5 integer")


class ProductivityRecord(BaseModel):
    """A day's productivity rating. One per date."""

    log_date: DateType
    productivity: int


class FoodIntakeRecord(BaseModel):
    """A day's meals as comma-separated food lists, plus water glasses."""

    log_date: DateType
    breakfast: Optional[str] = None
    lunch: Optional[str] = None
    dinner: Optional[str] = None
    snacks: Optional[str] = None
    water_intake: int = Field(default=0, ge=0, description="Glasses of water")


class SymptomRecord(BaseModel):
    """A post-meal symptom report. Several may exist per date."""

    id: str
    created_at: datetime
    meal_id: Optional[str] = None
    meal_type_tag: Optional[MealTypeTag] = None
    bloating: BloatingLevel = "None"
    energy: int = Field(ge=1, le=5)
    stool_consistency: int = Field(ge=1, le=7, description="Bristol stool scale")
    diarrhea: int = Field(default=0, ge=0, le=1)
    nausea: int = Field(default=0, ge=0, le=1)
    pain: int = Field(default=0, ge=0, le=1)

    @field_validator("bloating", mode="before")
    @classmethod
    def _bloating_case(cls, value):
        # stored case varies: "mild", "MILD"
        if isinstance(value, str):
            return value.strip().title()
        return value

    @field_validator("meal_type_tag", mode="before")
    @classmethod
    def _meal_tag_case(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class WeatherRecord(BaseModel):
    """Weather observed on a date."""

    log_date: DateType
    temperature: float
    condition: str
    humidity: Optional[float] = None
    pressure: Optional[float] = None


class WorkProfile(BaseModel):
    """Weekdays the user works and trains on."""

    working_days: list[str] = Field(
        default_factory=lambda: ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
    )
    sport_days: list[str] = Field(default_factory=list)


# ==================== Aggregates ====================


class GroupStats(BaseModel):
    """Count, mean and population standard deviation for one group."""

    key: str
    count: int = Field(ge=0)
    mean: float
    std_dev: float = Field(ge=0)


class FoodCorrelation(BaseModel):
    """Average outcome score across all days a food appeared."""

    food_name: str
    average_score: float
    occurrences: int = Field(ge=1)


class WeatherMoodCorrelation(BaseModel):
    """Average mood on days with a given weather condition."""

    condition: str
    average_mood_score: float
    average_temperature: float
    occurrences: int = Field(ge=1)


class MetricComparison(BaseModel):
    """Comparison of one metric between two cohorts."""

    avg_a: float
    avg_b: float
    std_dev_a: float
    std_dev_b: float
    count_a: int
    count_b: int
    diff: float
    diff_percent: float
    confidence: Confidence
    significant: bool


class ComparativeResult(BaseModel):
    """Mood and productivity compared between two kinds of day."""

    kind: AnalysisKind
    mood: MetricComparison
    productivity: MetricComparison
    confidence: Confidence
    significant: bool
    recommendation: str


class HydrationBucketStats(BaseModel):
    """Mood and productivity on days within one water-intake bucket."""

    bucket: HydrationBucket
    days: int = Field(ge=1)
    average_mood: Optional[float] = None
    average_productivity: Optional[float] = None
    mood_samples: int = 0
    productivity_samples: int = 0


class HydrationResult(BaseModel):
    """Hydration analysis across all buckets."""

    buckets: list[HydrationBucketStats]
    mood_impact: Impact
    productivity_impact: Impact
    optimal_water_intake: Optional[float] = None
    average_water_intake: float
    recommendation: str


class SymptomTrends(BaseModel):
    """Symptom aggregates for trend charts."""

    bloating_per_week: list[GroupStats]
    energy_by_meal_type: list[GroupStats]
    stool_distribution: dict[int, int]


class MoodTrends(BaseModel):
    """Weekly rollups and weekday pattern for mood and productivity."""

    mood_by_week: list[GroupStats]
    productivity_by_week: list[GroupStats]
    mood_by_weekday: list[GroupStats]


class FoodMoodImpact(BaseModel):
    """How a frequently eaten food relates to mood."""

    food_name: str = Field(description="Lower-cased food name")
    impact: Impact
    mood_change: float = Field(description="Average signed mood (-1..1) on days the food was eaten")
    occurrences: int = Field(ge=2)
    warning: Optional[str] = None
    alternatives: list[str] = Field(default_factory=list)


class TrendAlert(BaseModel):
    """A notable recent change in the user's journal."""

    type: AlertType
    severity: Severity
    message: str
    recommendation: Optional[str] = None


# ==================== Weekly Summary ====================


class WeeklyInsight(BaseModel):
    """A single natural-language finding for the week."""

    id: str
    type: InsightType
    category: InsightCategory
    title: str
    description: str
    emoji: str
    priority: int = Field(description="Higher is more important")


class MoodSummary(BaseModel):
    average_mood: float = Field(description="1-5 scale, 0 when no entries")
    most_common_mood: str
    mood_trend: Trend
    entries_count: int


class ProductivitySummary(BaseModel):
    average_productivity: float = Field(description="Raw rating scale, 0 when no entries")
    productivity_trend: Trend
    entries_count: int


class FoodSummary(BaseModel):
    diversity_score: int = Field(ge=0, le=100)
    total_meals_logged: int = Field(ge=0)
    top_foods: list[str] = Field(default_factory=list)


class WeeklySummary(BaseModel):
    """Weekly insight report for one ISO week."""

    week_start_date: DateType
    week_end_date: DateType
    insights: list[WeeklyInsight]
    mood_summary: MoodSummary
    productivity_summary: ProductivitySummary
    food_summary: FoodSummary
    streak_days: int = Field(ge=0, description="Days with a mood entry this week")
