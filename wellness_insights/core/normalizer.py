"""Normalizer - Pure functions mapping raw inputs into a common scoring space.

All functions are pure: same input always produces same output, no side effects.
Scoring tables come from an explicit ScoringConfig, never module state.
"""

import logging
import math
from collections import defaultdict
from datetime import date, datetime
from typing import Iterable

from .errors import MalformedRecordError
from .models import (
    FoodIntakeRecord,
    MoodRecord,
    ProductivityRecord,
    ScoringConfig,
    SymptomRecord,
)


logger = logging.getLogger(__name__)

DEFAULT_SCORING = ScoringConfig()

MEAL_SLOTS = ("breakfast", "lunch", "dinner", "snacks")

SYMPTOM_TYPES = ("bloating", "energy", "stool_consistency", "diarrhea", "nausea", "pain")


# ==================== Mood ====================


def normalize_mood(value: str | int, config: ScoringConfig = DEFAULT_SCORING) -> float | None:
    """Map a mood label or 1-5 number to a signed score in [-1, 1].

    Labels are matched after trimming, case-insensitively. Numeric strings
    such as "4" are treated as numbers.

    Args:
        value: Mood label or integer
        config: Scoring tables

    Returns:
        Signed score, or None if the value is not recognized
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return config.mood_numbers.get(value)
    if not isinstance(value, str):
        return None

    key = value.strip().lower()
    if key in config.mood_labels:
        return config.mood_labels[key]
    if key.isdigit():
        return config.mood_numbers.get(int(key))
    return None


def parse_mood(value: str | int, config: ScoringConfig = DEFAULT_SCORING) -> float:
    """Strict variant of normalize_mood.

    Raises:
        MalformedRecordError: If the value is not a recognized mood
    """
    score = normalize_mood(value, config)
    if score is None:
        raise MalformedRecordError("mood", value)
    return score


def mood_to_five_point(value: str | int, config: ScoringConfig = DEFAULT_SCORING) -> int | None:
    """Map a mood to its 1-5 ordinal (Sad=1 ... Ecstatic=5)."""
    score = normalize_mood(value, config)
    if score is None:
        return None
    for number, number_score in config.mood_numbers.items():
        if number_score == score:
            return number
    return None


def canonical_mood_label(value: str | int, config: ScoringConfig = DEFAULT_SCORING) -> str | None:
    """Return the display label for a mood, e.g. "very happy" -> "Very Happy"."""
    score = normalize_mood(value, config)
    if score is None:
        return None
    if isinstance(value, str):
        key = value.strip().lower()
        if key in config.mood_labels:
            return key.title()
    for label, label_score in config.mood_labels.items():
        if label_score == score:
            return label.title()
    return None


# ==================== Productivity & Symptoms ====================


def normalize_productivity(raw: int, scale_max: int) -> float:
    """Center a productivity rating on the midpoint of its scale.

    Positive means above the neutral midpoint: raw - ceil(scale_max / 2).

    Args:
        raw: Rating on a 1..scale_max scale
        scale_max: Top of the scale (e.g. 5 or 10)

    Returns:
        Signed productivity score

    Raises:
        MalformedRecordError: If raw is outside 1..scale_max
    """
    if isinstance(raw, bool) or not 1 <= raw <= scale_max:
        raise MalformedRecordError("productivity", raw)
    return float(raw - math.ceil(scale_max / 2))


def normalize_bloating(level: str, config: ScoringConfig = DEFAULT_SCORING) -> int:
    """Map a bloating level (None/Mild/Moderate/Severe) to 0-3."""
    key = str(level).strip().lower()
    if key not in config.bloating_levels:
        raise MalformedRecordError("bloating", level)
    return config.bloating_levels[key]


def symptom_score(
    record: SymptomRecord, symptom_type: str, config: ScoringConfig = DEFAULT_SCORING
) -> float:
    """Numeric score of one symptom on a record.

    Raises:
        ValueError: If symptom_type is not one of SYMPTOM_TYPES
    """
    if symptom_type not in SYMPTOM_TYPES:
        raise ValueError(f"Unknown symptom type: {symptom_type}")
    if symptom_type == "bloating":
        return float(normalize_bloating(record.bloating, config))
    return float(getattr(record, symptom_type))


def local_date(moment: datetime, config: ScoringConfig = DEFAULT_SCORING) -> date:
    """Calendar date of a timestamp in the configured timezone.

    Naive timestamps are taken to be local already.
    """
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(config.tzinfo).date()


# ==================== Foods ====================


def split_meal_items(text: str | None) -> list[str]:
    """Split a comma-separated meal string into food names.

    Tokens are trimmed and empty tokens dropped. Case is preserved.
    """
    if not text:
        return []
    return [item.strip() for item in text.split(",") if item.strip()]


def meal_items(record: FoodIntakeRecord) -> list[str]:
    """All food tokens of a day across meal slots, in slot order."""
    items: list[str] = []
    for slot in MEAL_SLOTS:
        items.extend(split_meal_items(getattr(record, slot)))
    return items


# ==================== Per-date maps ====================


def mood_by_date(
    records: Iterable[MoodRecord], config: ScoringConfig = DEFAULT_SCORING
) -> dict[date, float]:
    """Signed mood score per date; a later record for a date replaces an earlier one.

    Malformed records are logged and skipped.
    """
    scores: dict[date, float] = {}
    for record in records:
        try:
            scores[record.log_date] = parse_mood(record.mood, config)
        except MalformedRecordError as e:
            logger.warning("Skipping mood record on %s: %s", record.log_date, e)
    return scores


def productivity_by_date(
    records: Iterable[ProductivityRecord], config: ScoringConfig = DEFAULT_SCORING
) -> dict[date, float]:
    """Signed productivity score per date, skipping out-of-scale ratings."""
    scores: dict[date, float] = {}
    for record in records:
        try:
            scores[record.log_date] = normalize_productivity(
                record.productivity, config.productivity_scale_max
            )
        except MalformedRecordError as e:
            logger.warning("Skipping productivity record on %s: %s", record.log_date, e)
    return scores


def foods_by_date(records: Iterable[FoodIntakeRecord]) -> dict[date, list[str]]:
    """Food tokens per date; a re-saved date overwrites the earlier meals."""
    foods: dict[date, list[str]] = {}
    for record in records:
        foods[record.log_date] = meal_items(record)
    return foods


def symptom_score_by_date(
    records: Iterable[SymptomRecord],
    symptom_type: str,
    config: ScoringConfig = DEFAULT_SCORING,
) -> dict[date, float]:
    """Mean symptom score of all reports created on each local date."""
    if symptom_type not in SYMPTOM_TYPES:
        raise ValueError(f"Unknown symptom type: {symptom_type}")

    per_date: dict[date, list[float]] = defaultdict(list)
    for record in records:
        try:
            score = symptom_score(record, symptom_type, config)
            per_date[local_date(record.created_at, config)].append(score)
        except MalformedRecordError as e:
            logger.warning("Skipping symptom record %s: %s", record.id, e)

    return {day: sum(values) / len(values) for day, values in per_date.items()}
