"""Weekly Insight Generator - Pure functions for weekly summaries.

All functions are pure: same input always produces same output, no side effects.
"""

import logging
import math
from collections import Counter
from datetime import date, timedelta
from typing import Iterable

from .aggregator import mean, week_start
from .errors import MalformedRecordError
from .models import (
    FoodIntakeRecord,
    FoodSummary,
    MoodRecord,
    MoodSummary,
    ProductivityRecord,
    ProductivitySummary,
    ScoringConfig,
    Trend,
    WeeklyInsight,
    WeeklySummary,
)
from .normalizer import (
    DEFAULT_SCORING,
    MEAL_SLOTS,
    canonical_mood_label,
    mood_to_five_point,
    normalize_productivity,
    split_meal_items,
)


logger = logging.getLogger(__name__)

MOOD_TREND_THRESHOLD = 0.3
PRODUCTIVITY_TREND_THRESHOLD = 0.5


def classify_trend(current: list[float], previous: list[float], threshold: float) -> Trend:
    """Compare this week's mean against last week's.

    A week without prior-week samples is always stable.
    """
    if not current or not previous:
        return "stable"
    difference = mean(current) - mean(previous)
    if difference > threshold:
        return "improving"
    if difference < -threshold:
        return "declining"
    return "stable"


def _in_week(day: date, start: date) -> bool:
    return start <= day <= start + timedelta(days=6)


def _week_moods(
    records: Iterable[MoodRecord], start: date, config: ScoringConfig
) -> dict[date, tuple[int, str]]:
    """(1-5 score, label) per date of the week, skipping unrecognized moods."""
    moods: dict[date, tuple[int, str]] = {}
    for record in records:
        if not _in_week(record.log_date, start):
            continue
        score = mood_to_five_point(record.mood, config)
        if score is None:
            logger.warning("Skipping unrecognized mood on %s: %r", record.log_date, record.mood)
            continue
        moods[record.log_date] = (score, canonical_mood_label(record.mood, config))
    return moods


def _week_productivity(
    records: Iterable[ProductivityRecord], start: date, config: ScoringConfig
) -> dict[date, float]:
    """Raw productivity per date of the week, skipping out-of-scale ratings."""
    ratings: dict[date, float] = {}
    for record in records:
        if not _in_week(record.log_date, start):
            continue
        try:
            normalize_productivity(record.productivity, config.productivity_scale_max)
        except MalformedRecordError as e:
            logger.warning("Skipping productivity record on %s: %s", record.log_date, e)
            continue
        ratings[record.log_date] = float(record.productivity)
    return ratings


def calculate_mood_summary(
    current: dict[date, tuple[int, str]], previous: dict[date, tuple[int, str]]
) -> MoodSummary:
    """Mood average (1-5), most common label and trend."""
    if not current:
        return MoodSummary(average_mood=0, most_common_mood="No data", mood_trend="stable", entries_count=0)

    ordered = [current[day] for day in sorted(current)]
    scores = [float(score) for score, _ in ordered]
    label_counts = Counter(label for _, label in ordered)

    return MoodSummary(
        average_mood=mean(scores),
        most_common_mood=label_counts.most_common(1)[0][0],
        mood_trend=classify_trend(
            scores, [float(score) for score, _ in previous.values()], MOOD_TREND_THRESHOLD
        ),
        entries_count=len(scores),
    )


def calculate_productivity_summary(
    current: dict[date, float], previous: dict[date, float]
) -> ProductivitySummary:
    """Productivity average on the raw scale and trend."""
    if not current:
        return ProductivitySummary(average_productivity=0, productivity_trend="stable", entries_count=0)

    values = [current[day] for day in sorted(current)]
    return ProductivitySummary(
        average_productivity=mean(values),
        productivity_trend=classify_trend(
            values, list(previous.values()), PRODUCTIVITY_TREND_THRESHOLD
        ),
        entries_count=len(values),
    )


def calculate_food_summary(records: Iterable[FoodIntakeRecord]) -> FoodSummary:
    """Food diversity, meals logged and top foods for a set of days.

    Foods are compared lower-cased here. Diversity is unique foods over all
    food mentions, as a rounded percentage.
    """
    by_date = {r.log_date: r for r in records}

    all_foods: list[str] = []
    total_meals = 0
    for day in sorted(by_date):
        for slot in MEAL_SLOTS:
            items = split_meal_items(getattr(by_date[day], slot))
            if items:
                total_meals += 1
                all_foods.extend(item.lower() for item in items)

    if not all_foods:
        return FoodSummary(diversity_score=0, total_meals_logged=total_meals, top_foods=[])

    counts = Counter(all_foods)
    diversity = math.floor(len(counts) / len(all_foods) * 100 + 0.5)

    return FoodSummary(
        diversity_score=min(100, diversity),
        total_meals_logged=total_meals,
        top_foods=[food for food, _ in counts.most_common(3)],
    )


def generate_insights(
    mood: MoodSummary,
    productivity: ProductivitySummary,
    food: FoodSummary,
    days_logged: int,
    scale_max: int,
) -> list[WeeklyInsight]:
    """Apply the fixed insight rules and rank them by priority.

    Returns:
        Insights sorted by priority, highest first; equal priorities keep
        generation order. IDs only reflect generation order.
    """
    rules: list[tuple[str, str, str, str, str, int]] = []

    if mood.entries_count > 0:
        if mood.mood_trend == "improving":
            rules.append((
                "positive", "mood", "Mood Improving",
                f"Your mood is trending upward this week! Average mood: {mood.average_mood:.1f}/5",
                "📈", 10,
            ))
        elif mood.mood_trend == "declining":
            rules.append((
                "negative", "mood", "Mood Declining",
                "Your mood has been lower this week. Consider what might be affecting you.",
                "📉", 9,
            ))

        if mood.average_mood >= 4:
            rules.append((
                "positive", "mood", "Great Week",
                f"You had a wonderful week with an average mood of {mood.average_mood:.1f}/5!",
                "🌟", 8,
            ))

    if productivity.entries_count > 0:
        if productivity.productivity_trend == "improving":
            rules.append((
                "positive", "productivity", "Productivity Boost",
                f"Your productivity is up! Average: {productivity.average_productivity:.1f}/{scale_max}",
                "🚀", 9,
            ))
        elif productivity.productivity_trend == "declining":
            rules.append((
                "suggestion", "productivity", "Productivity Dip",
                "Productivity has decreased. Try reviewing your sleep and stress levels.",
                "💡", 7,
            ))

    if food.total_meals_logged > 0:
        if food.diversity_score >= 70:
            rules.append((
                "positive", "food", "Great Food Variety",
                f"Excellent food diversity this week ({food.diversity_score}%)!",
                "🥗", 6,
            ))
        elif food.diversity_score < 40:
            rules.append((
                "suggestion", "food", "Try More Variety",
                f"Your diet diversity is {food.diversity_score}%. Try adding new foods!",
                "🍽️", 5,
            ))

        if food.top_foods:
            rules.append((
                "neutral", "food", "Top Foods This Week",
                f"Most eaten: {', '.join(food.top_foods)}",
                "🏆", 4,
            ))

    if days_logged >= 5:
        rules.append((
            "positive", "streak", "Consistency Champion",
            f"You logged {days_logged} days this week! Keep it up!",
            "🔥", 8,
        ))
    elif 0 < days_logged < 3:
        rules.append((
            "suggestion", "streak", "Log More Often",
            f"You logged {days_logged} days this week. Try for at least 5 days!",
            "📝", 6,
        ))

    if mood.entries_count == 0 and productivity.entries_count == 0 and food.total_meals_logged == 0:
        rules.append((
            "suggestion", "general", "Start Tracking",
            "Begin logging your mood and productivity to see insights!",
            "🎯", 10,
        ))

    insights = [
        WeeklyInsight(
            id=f"insight-{n}",
            type=kind,
            category=category,
            title=title,
            description=description,
            emoji=emoji,
            priority=priority,
        )
        for n, (kind, category, title, description, emoji, priority) in enumerate(rules, start=1)
    ]
    return sorted(insights, key=lambda i: i.priority, reverse=True)


def generate_weekly_summary(
    moods: list[MoodRecord],
    ratings: list[ProductivityRecord],
    intakes: list[FoodIntakeRecord],
    week_of: date | None = None,
    config: ScoringConfig = DEFAULT_SCORING,
) -> WeeklySummary:
    """Generate the weekly summary for the ISO week containing week_of.

    Records outside the target week and the week before it are ignored, so
    callers may pass a user's full history.

    Args:
        moods: Mood records
        ratings: Productivity records
        intakes: Food intake records
        week_of: Any date in the target week (defaults to today)
        config: Scoring tables and productivity scale

    Returns:
        WeeklySummary; identical inputs always give an identical summary
    """
    if week_of is None:
        week_of = date.today()

    start = week_start(week_of)
    previous_start = start - timedelta(days=7)

    current_moods = _week_moods(moods, start, config)
    mood_summary = calculate_mood_summary(current_moods, _week_moods(moods, previous_start, config))
    productivity_summary = calculate_productivity_summary(
        _week_productivity(ratings, start, config),
        _week_productivity(ratings, previous_start, config),
    )
    food_summary = calculate_food_summary(r for r in intakes if _in_week(r.log_date, start))

    days_logged = len(current_moods)
    insights = generate_insights(
        mood_summary, productivity_summary, food_summary, days_logged, config.productivity_scale_max
    )

    return WeeklySummary(
        week_start_date=start,
        week_end_date=start + timedelta(days=6),
        insights=insights,
        mood_summary=mood_summary,
        productivity_summary=productivity_summary,
        food_summary=food_summary,
        streak_days=days_logged,
    )
