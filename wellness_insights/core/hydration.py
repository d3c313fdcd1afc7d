"""Hydration Analyzer - Pure functions relating water intake to outcomes.

All functions are pure: same input always produces same output, no side effects.
"""

from typing import Iterable

from .aggregator import mean
from .models import (
    FoodIntakeRecord,
    HydrationBucket,
    HydrationBucketStats,
    HydrationResult,
    Impact,
    MoodRecord,
    ProductivityRecord,
    ScoringConfig,
)
from .normalizer import DEFAULT_SCORING, mood_by_date, productivity_by_date
from .recommendations import hydration_recommendation


# (bucket, lowest glass count, representative glass count)
BUCKETS: tuple[tuple[HydrationBucket, int, float], ...] = (
    ("low", 1, 2.0),
    ("moderate", 4, 4.5),
    ("good", 6, 6.5),
    ("excellent", 8, 8.0),
)

MOOD_IMPACT_MARGIN = 0.2
PRODUCTIVITY_IMPACT_MARGIN = 0.3


def hydration_bucket(glasses: int) -> HydrationBucket | None:
    """Bucket for a day's water intake; None for 0 glasses (not logged)."""
    if glasses <= 0:
        return None
    selected = None
    for name, lowest, _ in BUCKETS:
        if glasses >= lowest:
            selected = name
    return selected


def _impact(low: float | None, high: float | None, margin: float) -> Impact:
    if low is None or high is None:
        return "neutral"
    if high - low > margin:
        return "positive"
    if low - high > margin:
        return "negative"
    return "neutral"


def _best_high(stats: dict[str, HydrationBucketStats], attr: str) -> float | None:
    values = [
        getattr(stats[name], attr)
        for name in ("good", "excellent")
        if name in stats and getattr(stats[name], attr) is not None
    ]
    return max(values) if values else None


def analyze_hydration(
    intakes: Iterable[FoodIntakeRecord],
    moods: Iterable[MoodRecord],
    ratings: Iterable[ProductivityRecord],
    config: ScoringConfig = DEFAULT_SCORING,
) -> HydrationResult:
    """Mood and productivity per water-intake bucket.

    Days with no water logged are left out entirely. Impact compares the low
    bucket against the better of the good and excellent buckets.

    Args:
        intakes: Food intake records carrying water_intake
        moods: Mood records joined by date
        ratings: Productivity records joined by date
        config: Scoring tables

    Returns:
        HydrationResult with per-bucket stats, impacts and a recommendation
    """
    water_by_date = {r.log_date: r.water_intake for r in intakes}
    mood_scores = mood_by_date(moods, config)
    productivity_scores = productivity_by_date(ratings, config)

    days: dict[str, int] = {}
    mood_samples: dict[str, list[float]] = {}
    productivity_samples: dict[str, list[float]] = {}
    glasses: list[int] = []

    for day in sorted(water_by_date):
        bucket = hydration_bucket(water_by_date[day])
        if bucket is None:
            continue
        glasses.append(water_by_date[day])
        days[bucket] = days.get(bucket, 0) + 1
        if day in mood_scores:
            mood_samples.setdefault(bucket, []).append(mood_scores[day])
        if day in productivity_scores:
            productivity_samples.setdefault(bucket, []).append(productivity_scores[day])

    stats: dict[str, HydrationBucketStats] = {}
    for name, _, _ in BUCKETS:
        moods_in = mood_samples.get(name, [])
        prods_in = productivity_samples.get(name, [])
        if not moods_in and not prods_in:
            continue
        stats[name] = HydrationBucketStats(
            bucket=name,
            days=days[name],
            average_mood=mean(moods_in) if moods_in else None,
            average_productivity=mean(prods_in) if prods_in else None,
            mood_samples=len(moods_in),
            productivity_samples=len(prods_in),
        )

    low = stats.get("low")
    mood_impact = _impact(
        low.average_mood if low else None, _best_high(stats, "average_mood"), MOOD_IMPACT_MARGIN
    )
    productivity_impact = _impact(
        low.average_productivity if low else None,
        _best_high(stats, "average_productivity"),
        PRODUCTIVITY_IMPACT_MARGIN,
    )

    optimal = None
    best_mood = None
    for name, _, representative in BUCKETS:
        bucket_mood = stats[name].average_mood if name in stats else None
        if bucket_mood is not None and (best_mood is None or bucket_mood > best_mood):
            best_mood = bucket_mood
            optimal = representative

    average_intake = mean([float(g) for g in glasses])

    return HydrationResult(
        buckets=list(stats.values()),
        mood_impact=mood_impact,
        productivity_impact=productivity_impact,
        optimal_water_intake=optimal,
        average_water_intake=average_intake,
        recommendation=hydration_recommendation(average_intake, mood_impact, len(glasses)),
    )
