"""Comparative Analyzer - Pure functions comparing two cohorts of days.

All functions are pure: same input always produces same output, no side effects.
"""

from typing import Iterable

from .aggregator import is_in_days, mean, std_dev
from .models import (
    AnalysisKind,
    ComparativeResult,
    Confidence,
    MetricComparison,
    MoodRecord,
    ProductivityRecord,
    ScoringConfig,
    WorkProfile,
)
from .normalizer import DEFAULT_SCORING, mood_by_date, productivity_by_date
from .recommendations import comparative_recommendation


# Minimum cohort size for each confidence tier. A sample-size heuristic,
# not a statistical test.
HIGH_CONFIDENCE_SAMPLES = 20
MEDIUM_CONFIDENCE_SAMPLES = 10

SIGNIFICANT_DIFF = 0.3
SIGNIFICANT_DIFF_PERCENT = 15

_CONFIDENCE_RANK = {"low": 0, "medium": 1, "high": 2}


def confidence_tier(count_a: int, count_b: int) -> Confidence:
    """Confidence from the smaller cohort size."""
    smaller = min(count_a, count_b)
    if smaller >= HIGH_CONFIDENCE_SAMPLES:
        return "high"
    if smaller >= MEDIUM_CONFIDENCE_SAMPLES:
        return "medium"
    return "low"


def compare(cohort_a: list[float], cohort_b: list[float]) -> MetricComparison:
    """Compare the averages of two cohorts.

    Empty cohorts average to 0, and a zero baseline gives a 0 percentage
    difference instead of an error.

    Args:
        cohort_a: Values for the day type under study
        cohort_b: Values for the remaining days

    Returns:
        MetricComparison with averages, spreads, differences and flags
    """
    avg_a = mean(cohort_a)
    avg_b = mean(cohort_b)
    diff = avg_a - avg_b
    diff_percent = (diff / abs(avg_b)) * 100 if avg_b != 0 else 0.0

    return MetricComparison(
        avg_a=avg_a,
        avg_b=avg_b,
        std_dev_a=std_dev(cohort_a),
        std_dev_b=std_dev(cohort_b),
        count_a=len(cohort_a),
        count_b=len(cohort_b),
        diff=diff,
        diff_percent=diff_percent,
        confidence=confidence_tier(len(cohort_a), len(cohort_b)),
        significant=abs(diff) > SIGNIFICANT_DIFF or abs(diff_percent) > SIGNIFICANT_DIFF_PERCENT,
    )


def compare_day_types(
    kind: AnalysisKind,
    mood_a: list[float],
    mood_b: list[float],
    productivity_a: list[float],
    productivity_b: list[float],
) -> ComparativeResult:
    """Compare mood and productivity independently, then combine them.

    The result is significant if either metric is, and its confidence is the
    weaker of the two metric tiers. The recommendation only speaks about
    metrics with samples on both sides.
    """
    mood = compare(mood_a, mood_b)
    productivity = compare(productivity_a, productivity_b)
    significant = mood.significant or productivity.significant
    mood_compared = bool(mood_a and mood_b)
    productivity_compared = bool(productivity_a and productivity_b)
    advice_significant = (mood_compared and mood.significant) or (
        productivity_compared and productivity.significant
    )

    return ComparativeResult(
        kind=kind,
        mood=mood,
        productivity=productivity,
        confidence=min(mood.confidence, productivity.confidence, key=_CONFIDENCE_RANK.__getitem__),
        significant=significant,
        recommendation=comparative_recommendation(
            kind,
            mood.diff,
            productivity.diff,
            advice_significant,
            mood_compared=mood_compared,
            productivity_compared=productivity_compared,
        ),
    )


def _split_by_days(values_by_date: dict, day_names: list[str]) -> tuple[list[float], list[float]]:
    inside: list[float] = []
    outside: list[float] = []
    for day in sorted(values_by_date):
        (inside if is_in_days(day, day_names) else outside).append(values_by_date[day])
    return inside, outside


def _day_type_analysis(
    kind: AnalysisKind,
    day_names: list[str],
    moods: Iterable[MoodRecord],
    ratings: Iterable[ProductivityRecord],
    config: ScoringConfig,
) -> ComparativeResult:
    mood_a, mood_b = _split_by_days(mood_by_date(moods, config), day_names)
    productivity_a, productivity_b = _split_by_days(productivity_by_date(ratings, config), day_names)
    return compare_day_types(kind, mood_a, mood_b, productivity_a, productivity_b)


def working_day_analysis(
    moods: Iterable[MoodRecord],
    ratings: Iterable[ProductivityRecord],
    profile: WorkProfile,
    config: ScoringConfig = DEFAULT_SCORING,
) -> ComparativeResult:
    """Working days vs. non-working days, using the profile's working_days."""
    return _day_type_analysis("working", profile.working_days, moods, ratings, config)


def training_day_analysis(
    moods: Iterable[MoodRecord],
    ratings: Iterable[ProductivityRecord],
    profile: WorkProfile,
    config: ScoringConfig = DEFAULT_SCORING,
) -> ComparativeResult:
    """Training days vs. rest days, using the profile's sport_days."""
    return _day_type_analysis("training", profile.sport_days, moods, ratings, config)
