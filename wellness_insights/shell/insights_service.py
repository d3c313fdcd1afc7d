"""Insights Service - Fetch-then-compute entry points for each analysis.

Every operation reads all the records it needs first and only then calls
the pure core functions. Read errors propagate unchanged.
"""

import logging
from datetime import date, datetime, timedelta

from ..core.aggregator import (
    bloating_per_week,
    energy_by_meal_type,
    stool_distribution,
    week_start,
    weekday_pattern,
    weekly_rollup,
)
from ..core.alerts import detect_trend_alerts
from ..core.comparison import training_day_analysis, working_day_analysis
from ..core.correlation import (
    analyze_food_mood_impact,
    food_mood_correlation,
    food_productivity_correlation,
    food_symptom_correlation,
    weather_mood_correlation,
)
from ..core.errors import NoDataError
from ..core.hydration import analyze_hydration
from ..core.insights import generate_weekly_summary
from ..core.models import (
    ComparativeResult,
    FoodCorrelation,
    FoodMoodImpact,
    HydrationResult,
    MoodTrends,
    ScoringConfig,
    SymptomTrends,
    TrendAlert,
    WeatherMoodCorrelation,
    WeeklySummary,
)
from ..core.normalizer import DEFAULT_SCORING, SYMPTOM_TYPES, mood_by_date, productivity_by_date
from .firestore_client import InsightsFirestoreClient


logger = logging.getLogger(__name__)

# Recent history judged by the food-mood impact analysis
FOOD_IMPACT_WINDOW_DAYS = 30


class InsightsService:
    """Computes a user's insights from records held by the read client."""

    def __init__(self, db: InsightsFirestoreClient, config: ScoringConfig = DEFAULT_SCORING) -> None:
        """Initialize the service.

        Args:
            db: Read client for raw records
            config: Scoring tables and productivity scale
        """
        self._db = db
        self.config = config

    def today(self) -> date:
        """Current date in the user's timezone."""
        return datetime.now(self.config.tzinfo).date()

    # ==================== Food Correlations ====================

    def compute_food_mood_correlation(self, user_id: str) -> list[FoodCorrelation]:
        """Average mood score per food over the user's full history."""
        moods = self._db.fetch_mood_records(user_id)
        intakes = self._db.fetch_food_intake_records(user_id)
        rows = food_mood_correlation(moods, intakes, self.config)
        logger.info("Computed food-mood correlation for %s: %d foods", user_id[:8], len(rows))
        return rows

    def compute_food_productivity_correlation(self, user_id: str) -> list[FoodCorrelation]:
        """Average productivity score per food over the user's full history."""
        ratings = self._db.fetch_productivity_records(user_id)
        intakes = self._db.fetch_food_intake_records(user_id)
        rows = food_productivity_correlation(ratings, intakes, self.config)
        logger.info("Computed food-productivity correlation for %s: %d foods", user_id[:8], len(rows))
        return rows

    def compute_food_symptom_correlation(self, user_id: str, symptom_type: str) -> list[FoodCorrelation]:
        """Average symptom score per food.

        Raises:
            ValueError: If symptom_type is not a known symptom
        """
        if symptom_type not in SYMPTOM_TYPES:
            raise ValueError(f"Unknown symptom type: {symptom_type}")

        symptoms = self._db.fetch_symptom_records(user_id, tz=self.config.tzinfo)
        intakes = self._db.fetch_food_intake_records(user_id)
        rows = food_symptom_correlation(symptoms, intakes, symptom_type, self.config)
        logger.info(
            "Computed food-%s correlation for %s: %d foods", symptom_type, user_id[:8], len(rows)
        )
        return rows

    def compute_food_mood_impact(self, user_id: str, today: date | None = None) -> list[FoodMoodImpact]:
        """Foods from the last 30 days judged by their effect on mood."""
        if today is None:
            today = self.today()
        start = today - timedelta(days=FOOD_IMPACT_WINDOW_DAYS - 1)

        moods = self._db.fetch_mood_records(user_id, start, today)
        intakes = self._db.fetch_food_intake_records(user_id, start, today)
        rows = analyze_food_mood_impact(moods, intakes, self.config)
        logger.info(
            "Computed food-mood impact for %s: %d foods, %d negative",
            user_id[:8], len(rows), sum(r.impact == "negative" for r in rows),
        )
        return rows

    def compute_weather_mood_correlation(self, user_id: str) -> list[WeatherMoodCorrelation]:
        """Average mood per weather condition."""
        moods = self._db.fetch_mood_records(user_id)
        weather = self._db.fetch_weather_records(user_id)
        return weather_mood_correlation(moods, weather, self.config)

    # ==================== Comparisons ====================

    def compute_working_day_analysis(self, user_id: str) -> ComparativeResult:
        """Mood and productivity on working days vs. other days.

        Raises:
            NoDataError: If the user has no mood or productivity records
        """
        moods = self._db.fetch_mood_records(user_id)
        ratings = self._db.fetch_productivity_records(user_id)
        profile = self._db.fetch_work_profile(user_id)
        if not moods and not ratings:
            raise NoDataError("No mood or productivity records yet")

        result = working_day_analysis(moods, ratings, profile, self.config)
        logger.info(
            "Computed working-day analysis for %s: significant=%s confidence=%s",
            user_id[:8], result.significant, result.confidence,
        )
        return result

    def compute_training_day_analysis(self, user_id: str) -> ComparativeResult:
        """Mood and productivity on training days vs. rest days.

        Raises:
            NoDataError: If the user has no mood or productivity records
        """
        moods = self._db.fetch_mood_records(user_id)
        ratings = self._db.fetch_productivity_records(user_id)
        profile = self._db.fetch_work_profile(user_id)
        if not moods and not ratings:
            raise NoDataError("No mood or productivity records yet")

        result = training_day_analysis(moods, ratings, profile, self.config)
        logger.info(
            "Computed training-day analysis for %s: significant=%s confidence=%s",
            user_id[:8], result.significant, result.confidence,
        )
        return result

    def compute_hydration_analysis(self, user_id: str) -> HydrationResult:
        """Mood and productivity per water-intake bucket.

        Raises:
            NoDataError: If the user has no food intake records
        """
        intakes = self._db.fetch_food_intake_records(user_id)
        moods = self._db.fetch_mood_records(user_id)
        ratings = self._db.fetch_productivity_records(user_id)
        if not intakes:
            raise NoDataError("No food or water records yet")

        result = analyze_hydration(intakes, moods, ratings, self.config)
        logger.info(
            "Computed hydration analysis for %s: mood_impact=%s", user_id[:8], result.mood_impact
        )
        return result

    # ==================== Trends ====================

    def compute_mood_trends(self, user_id: str) -> MoodTrends:
        """Weekly mood and productivity rollups plus the weekday mood pattern."""
        mood_records = self._db.fetch_mood_records(user_id)
        productivity_records = self._db.fetch_productivity_records(user_id)

        moods = mood_by_date(mood_records, self.config)
        ratings = productivity_by_date(productivity_records, self.config)
        return MoodTrends(
            mood_by_week=weekly_rollup(moods),
            productivity_by_week=weekly_rollup(ratings),
            mood_by_weekday=weekday_pattern(moods),
        )

    def compute_symptom_trends(self, user_id: str) -> SymptomTrends:
        """Bloating per week, energy per meal type and stool distribution."""
        symptoms = self._db.fetch_symptom_records(user_id, tz=self.config.tzinfo)
        return SymptomTrends(
            bloating_per_week=bloating_per_week(symptoms, self.config),
            energy_by_meal_type=energy_by_meal_type(symptoms),
            stool_distribution=stool_distribution(symptoms),
        )

    # ==================== Weekly Insights ====================

    def generate_weekly_insights(self, user_id: str, week_of: date | None = None) -> WeeklySummary:
        """Generate and cache the weekly summary for the week containing week_of.

        Only the target week and the week before it are fetched.
        """
        if week_of is None:
            week_of = self.today()
        start = week_start(week_of)
        fetch_from = start - timedelta(days=7)
        fetch_to = start + timedelta(days=6)

        moods = self._db.fetch_mood_records(user_id, fetch_from, fetch_to)
        ratings = self._db.fetch_productivity_records(user_id, fetch_from, fetch_to)
        intakes = self._db.fetch_food_intake_records(user_id, start, fetch_to)

        summary = generate_weekly_summary(moods, ratings, intakes, week_of, self.config)
        logger.info(
            "Generated weekly summary for %s, week of %s: %d insights",
            user_id[:8], start, len(summary.insights),
        )
        self._db.save_weekly_summary(user_id, summary)
        return summary

    def get_latest_weekly_summary(self, user_id: str) -> WeeklySummary:
        """Most recently cached weekly summary, generated for this week if none exists."""
        cached = self._db.fetch_weekly_summaries(user_id, limit=1)
        if cached:
            return cached[0]
        logger.info("No cached weekly summary for %s, generating one", user_id[:8])
        return self.generate_weekly_insights(user_id)

    def get_weekly_summary_history(self, user_id: str, limit: int | None = None) -> list[WeeklySummary]:
        """Cached weekly summaries, newest week first.

        Raises:
            NoDataError: If no summary has been generated yet
        """
        summaries = self._db.fetch_weekly_summaries(user_id, limit=limit)
        if not summaries:
            raise NoDataError("No weekly summaries generated yet")
        return summaries

    # ==================== Alerts ====================

    def compute_trend_alerts(self, user_id: str, today: date | None = None) -> list[TrendAlert]:
        """Mood and streak alerts as of today."""
        if today is None:
            today = self.today()
        moods = self._db.fetch_mood_records(user_id)
        alerts = detect_trend_alerts(moods, today, self.config)
        if alerts:
            logger.info(
                "Trend alerts for %s: %s", user_id[:8], ", ".join(a.type for a in alerts)
            )
        return alerts
