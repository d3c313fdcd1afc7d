"""Aggregator - Pure functions for grouping and summarizing values.

All functions are pure: same input always produces same output, no side effects.
"""

import logging
import math
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Hashable, Iterable

from .models import GroupStats, ScoringConfig, SymptomRecord
from .normalizer import DEFAULT_SCORING, local_date, normalize_bloating
from .errors import MalformedRecordError


logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def mean(values: list[float]) -> float:
    """Arithmetic mean; 0 for an empty list."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def std_dev(values: list[float]) -> float:
    """Population standard deviation; 0 when fewer than two values."""
    if len(values) < 2:
        return 0.0
    avg = mean(values)
    variance = sum((v - avg) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


def aggregate(pairs: Iterable[tuple[Hashable, float]]) -> list[GroupStats]:
    """Group (key, value) pairs and summarize each group.

    Args:
        pairs: Ordered (key, value) pairs

    Returns:
        One GroupStats per distinct key, in order of first appearance.
        Keys are rendered with str() (dates as YYYY-MM-DD).
    """
    groups: dict[Hashable, list[float]] = {}
    for key, value in pairs:
        groups.setdefault(key, []).append(value)

    return [
        GroupStats(
            key=key.isoformat() if isinstance(key, date) else str(key),
            count=len(values),
            mean=mean(values),
            std_dev=std_dev(values),
        )
        for key, values in groups.items()
    ]


# ==================== Calendar Keys ====================


def week_start(day: date | datetime) -> date:
    """Monday of the ISO week containing day; timestamps are reduced to their date."""
    if isinstance(day, datetime):
        day = day.date()
    return day - timedelta(days=day.weekday())


def weekday_name(day: date) -> str:
    """English weekday name, independent of locale."""
    return WEEKDAY_NAMES[day.weekday()]


def is_in_days(day: date, day_names: Iterable[str]) -> bool:
    """Whether day falls on one of the named weekdays (case-insensitive)."""
    wanted = {name.strip().lower() for name in day_names}
    return weekday_name(day).lower() in wanted


def weekly_rollup(values_by_date: dict[date, float]) -> list[GroupStats]:
    """GroupStats per ISO week start, in week order."""
    return aggregate(
        (week_start(day), values_by_date[day]) for day in sorted(values_by_date)
    )


def weekday_pattern(values_by_date: dict[date, float]) -> list[GroupStats]:
    """GroupStats per weekday name, Monday first; weekdays without samples are omitted."""
    ordered = sorted(values_by_date, key=lambda d: (d.weekday(), d))
    return aggregate((weekday_name(day), values_by_date[day]) for day in ordered)


# ==================== Symptom Aggregates ====================


def bloating_per_week(
    records: Iterable[SymptomRecord], config: ScoringConfig = DEFAULT_SCORING
) -> list[GroupStats]:
    """Mean bloating (0-3) per ISO week of the local report date, in week order."""
    pairs = []
    for record in sorted(records, key=lambda r: r.created_at):
        try:
            level = float(normalize_bloating(record.bloating, config))
            pairs.append((week_start(local_date(record.created_at, config)), level))
        except MalformedRecordError as e:
            logger.warning("Skipping symptom record %s: %s", record.id, e)
    return aggregate(pairs)


def energy_by_meal_type(records: Iterable[SymptomRecord]) -> list[GroupStats]:
    """Mean energy per meal type tag; untagged reports group as "unknown"."""
    ordered = sorted(records, key=lambda r: r.created_at)
    return aggregate((r.meal_type_tag or "unknown", float(r.energy)) for r in ordered)


def stool_distribution(records: Iterable[SymptomRecord]) -> dict[int, int]:
    """Number of reports per Bristol stool type, ascending by type."""
    counts = Counter(r.stool_consistency for r in records)
    return {stool_type: counts[stool_type] for stool_type in sorted(counts)}
