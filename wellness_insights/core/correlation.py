"""Correlation Engine - Pure functions relating foods and weather to outcomes.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import date
from typing import Iterable

from .models import (
    FoodCorrelation,
    FoodIntakeRecord,
    FoodMoodImpact,
    Impact,
    MoodRecord,
    ProductivityRecord,
    ScoringConfig,
    SymptomRecord,
    WeatherMoodCorrelation,
    WeatherRecord,
)
from .normalizer import (
    DEFAULT_SCORING,
    foods_by_date,
    mood_by_date,
    productivity_by_date,
    symptom_score_by_date,
)
from .recommendations import food_alternatives, food_warning


# Foods eaten fewer times than this are not judged
MIN_FOOD_OCCURRENCES = 2

# Average signed mood beyond which a food counts as lifting or lowering mood
FOOD_IMPACT_MARGIN = 0.2


def correlate(
    outcome_by_date: dict[date, float],
    foods: dict[date, list[str]],
) -> list[FoodCorrelation]:
    """Average outcome score across all days each food appeared.

    Only dates present in both maps contribute; a day with food but no
    outcome is excluded rather than treated as neutral. Each occurrence of a
    food counts, so a food eaten twice on one day weighs twice.

    Args:
        outcome_by_date: Outcome score per date
        foods: Food tokens per date

    Returns:
        Rows ranked by average score, highest first. Ties keep the order in
        which the foods first appeared, visiting dates chronologically.
    """
    stats: dict[str, list[float]] = {}
    for day in sorted(foods):
        if day not in outcome_by_date:
            continue
        score = outcome_by_date[day]
        for food in foods[day]:
            entry = stats.setdefault(food, [0.0, 0])
            entry[0] += score
            entry[1] += 1

    rows = [
        FoodCorrelation(food_name=food, average_score=total / count, occurrences=count)
        for food, (total, count) in stats.items()
    ]
    return sorted(rows, key=lambda r: r.average_score, reverse=True)


def food_mood_correlation(
    moods: Iterable[MoodRecord],
    intakes: Iterable[FoodIntakeRecord],
    config: ScoringConfig = DEFAULT_SCORING,
) -> list[FoodCorrelation]:
    """Average signed mood (-1..1) per food."""
    return correlate(mood_by_date(moods, config), foods_by_date(intakes))


def food_productivity_correlation(
    ratings: Iterable[ProductivityRecord],
    intakes: Iterable[FoodIntakeRecord],
    config: ScoringConfig = DEFAULT_SCORING,
) -> list[FoodCorrelation]:
    """Average midpoint-centered productivity per food."""
    return correlate(productivity_by_date(ratings, config), foods_by_date(intakes))


def food_symptom_correlation(
    symptoms: Iterable[SymptomRecord],
    intakes: Iterable[FoodIntakeRecord],
    symptom_type: str,
    config: ScoringConfig = DEFAULT_SCORING,
) -> list[FoodCorrelation]:
    """Average symptom score per food.

    The outcome of a date is the mean over every symptom report created
    that day, not a single report.
    """
    outcome = symptom_score_by_date(symptoms, symptom_type, config)
    return correlate(outcome, foods_by_date(intakes))

def classify_food_impact(mood_change: float) -> Impact:
    if mood_change > FOOD_IMPACT_MARGIN:
        return "positive"
    if mood_change < -FOOD_IMPACT_MARGIN:
        return "negative"
    return "neutral"


def analyze_food_mood_impact(
    moods: Iterable[MoodRecord],
    intakes: Iterable[FoodIntakeRecord],
    config: ScoringConfig = DEFAULT_SCORING,
) -> list[FoodMoodImpact]:
    """Judge each frequently eaten food by the mood on the days it was eaten.

    Foods are matched case-insensitively. Foods that lower mood carry a
    warning and a list of alternatives.

    Args:
        moods: Mood records
        intakes: Food intake records
        config: Scoring tables

    Returns:
        Foods eaten at least twice, strongest impact first
    """
    foods = {
        day: [food.lower() for food in items]
        for day, items in foods_by_date(intakes).items()
    }

    rows: list[FoodMoodImpact] = []
    for row in correlate(mood_by_date(moods, config), foods):
        if row.occurrences < MIN_FOOD_OCCURRENCES:
            continue
        impact = classify_food_impact(row.average_score)
        negative = impact == "negative"
        rows.append(FoodMoodImpact(
            food_name=row.food_name,
            impact=impact,
            mood_change=row.average_score,
            occurrences=row.occurrences,
            warning=food_warning(row.food_name) if negative else None,
            alternatives=food_alternatives(row.food_name) if negative else [],
        ))
    return sorted(rows, key=lambda r: abs(r.mood_change), reverse=True)


def weather_mood_correlation(
    moods: Iterable[MoodRecord],
    weather: Iterable[WeatherRecord],
    config: ScoringConfig = DEFAULT_SCORING,
) -> list[WeatherMoodCorrelation]:
    """Average mood per weather condition, joined by date.

    Conditions are compared case-insensitively and reported lower-cased.
    """
    scores = mood_by_date(moods, config)
    weather_by_date = {w.log_date: w for w in weather}

    stats: dict[str, list[float]] = {}
    for day in sorted(weather_by_date):
        if day not in scores:
            continue
        record = weather_by_date[day]
        entry = stats.setdefault(record.condition.strip().lower(), [0.0, 0.0, 0])
        entry[0] += scores[day]
        entry[1] += record.temperature
        entry[2] += 1

    rows = [
        WeatherMoodCorrelation(
            condition=condition,
            average_mood_score=mood_total / count,
            average_temperature=temp_total / count,
            occurrences=count,
        )
        for condition, (mood_total, temp_total, count) in stats.items()
    ]
    return sorted(rows, key=lambda r: r.average_mood_score, reverse=True)
