"""Unit tests for the aggregator - pure functions, no mocks needed."""

import math
from datetime import date, datetime, timezone

from wellness_insights.core.models import ScoringConfig, SymptomRecord
from wellness_insights.core.aggregator import (
    aggregate,
    bloating_per_week,
    energy_by_meal_type,
    is_in_days,
    mean,
    std_dev,
    stool_distribution,
    week_start,
    weekday_name,
    weekday_pattern,
    weekly_rollup,
)


def make_symptom(created_at, **overrides):
    data = dict(
        id=f"s-{created_at.isoformat()}",
        created_at=created_at,
        bloating="None",
        energy=3,
        stool_consistency=4,
    )
    data.update(overrides)
    return SymptomRecord(**data)


class TestStatistics:
    """Tests for mean and std_dev."""

    def test_empty(self):
        """Empty input gives zeros."""
        assert mean([]) == 0
        assert std_dev([]) == 0

    def test_single_value_has_zero_spread(self):
        """One value has a standard deviation of exactly 0."""
        assert std_dev([3.7]) == 0

    def test_population_std_dev(self):
        """Variance divides by count, not count - 1."""
        # mean 5, squared deviations 9+1+1+9 = 20, /4 = 5
        assert math.isclose(std_dev([2, 4, 6, 8]), math.sqrt(5))


class TestAggregate:
    """Tests for aggregate."""

    def test_groups_in_first_appearance_order(self):
        """Groups appear in the order their keys first occur."""
        stats = aggregate([("b", 1.0), ("a", 2.0), ("b", 3.0)])

        assert [s.key for s in stats] == ["b", "a"]
        assert stats[0].count == 2
        assert stats[0].mean == 2.0
        assert stats[0].std_dev == 1.0
        assert stats[1].std_dev == 0

    def test_date_keys_rendered_iso(self):
        """Date keys are rendered as YYYY-MM-DD."""
        stats = aggregate([(date(2024, 1, 1), 1.0)])
        assert stats[0].key == "2024-01-01"

    def test_empty(self):
        """No pairs give no groups."""
        assert aggregate([]) == []


class TestCalendarKeys:
    """Tests for week and weekday helpers."""

    def test_week_start_is_monday(self):
        """Every day of a week maps to its Monday."""
        # 2024-01-01 is a Monday
        for day in range(1, 8):
            assert week_start(date(2024, 1, day)) == date(2024, 1, 1)
        assert week_start(date(2024, 1, 8)) == date(2024, 1, 8)

    def test_week_start_of_sunday(self):
        """Sunday belongs to the week that started six days earlier."""
        assert week_start(date(2024, 1, 14)) == date(2024, 1, 8)

    def test_week_start_normalizes_datetime(self):
        """Timestamps are normalized to a date."""
        assert week_start(datetime(2024, 1, 3, 23, 59)) == date(2024, 1, 1)

    def test_weekday_name(self):
        """Weekday names are English."""
        assert weekday_name(date(2024, 1, 6)) == "Saturday"

    def test_is_in_days_case_insensitive(self):
        """Profile day names match regardless of case."""
        assert is_in_days(date(2024, 1, 1), ["monday"])
        assert not is_in_days(date(2024, 1, 6), ["Monday", "Friday"])


class TestRollups:
    """Tests for weekly and weekday rollups."""

    def test_weekly_rollup(self):
        """Values are grouped per ISO week in week order."""
        values = {
            date(2024, 1, 9): 1.0,
            date(2024, 1, 1): -1.0,
            date(2024, 1, 2): 0.0,
        }
        stats = weekly_rollup(values)

        assert [s.key for s in stats] == ["2024-01-01", "2024-01-08"]
        assert stats[0].mean == -0.5
        assert stats[1].count == 1

    def test_weekday_pattern_monday_first(self):
        """Weekdays are listed Monday first, skipping days without data."""
        values = {
            date(2024, 1, 7): 1.0,   # Sunday
            date(2024, 1, 1): 0.0,   # Monday
            date(2024, 1, 8): 0.5,   # Monday
        }
        stats = weekday_pattern(values)

        assert [s.key for s in stats] == ["Monday", "Sunday"]
        assert stats[0].mean == 0.25


class TestSymptomAggregates:
    """Tests for symptom trend aggregates."""

    def test_bloating_per_week(self):
        """Bloating is averaged per ISO week."""
        records = [
            make_symptom(datetime(2024, 1, 2, 9), bloating="Severe"),
            make_symptom(datetime(2024, 1, 3, 9), bloating="Mild"),
            make_symptom(datetime(2024, 1, 10, 9), bloating="None"),
        ]
        stats = bloating_per_week(records)

        assert [(s.key, s.mean) for s in stats] == [("2024-01-01", 2.0), ("2024-01-08", 0.0)]

    def test_bloating_week_uses_local_date(self):
        """A Sunday-night report in New York stays in that week."""
        records = [make_symptom(datetime(2024, 1, 8, 3, 0, tzinfo=timezone.utc), bloating="Mild")]

        local = bloating_per_week(records, ScoringConfig(timezone="America/New_York"))
        utc = bloating_per_week(records)

        assert [s.key for s in local] == ["2024-01-01"]
        assert [s.key for s in utc] == ["2024-01-08"]

    def test_energy_by_meal_type(self):
        """Energy is averaged per meal tag, untagged as unknown."""
        records = [
            make_symptom(datetime(2024, 1, 1, 8), meal_type_tag="breakfast", energy=4),
            make_symptom(datetime(2024, 1, 2, 8), meal_type_tag="breakfast", energy=2),
            make_symptom(datetime(2024, 1, 2, 13), energy=5),
        ]
        stats = energy_by_meal_type(records)

        assert [(s.key, s.mean) for s in stats] == [("breakfast", 3.0), ("unknown", 5.0)]

    def test_stool_distribution(self):
        """Reports are counted per Bristol type, ascending."""
        records = [
            make_symptom(datetime(2024, 1, 1, 8), stool_consistency=6),
            make_symptom(datetime(2024, 1, 1, 9), stool_consistency=3),
            make_symptom(datetime(2024, 1, 1, 10), stool_consistency=6),
        ]
        assert list(stool_distribution(records).items()) == [(3, 1), (6, 2)]
