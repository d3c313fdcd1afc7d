"""Unit tests for the normalizer - pure functions, no mocks needed."""

import pytest
from datetime import date, datetime, timezone
from pydantic import ValidationError

from wellness_insights.core.errors import MalformedRecordError
from wellness_insights.core.models import (
    FoodIntakeRecord,
    MoodRecord,
    ProductivityRecord,
    ScoringConfig,
    SymptomRecord,
)
from wellness_insights.core.normalizer import (
    DEFAULT_SCORING,
    canonical_mood_label,
    foods_by_date,
    local_date,
    meal_items,
    mood_by_date,
    mood_to_five_point,
    normalize_bloating,
    normalize_mood,
    normalize_productivity,
    parse_mood,
    productivity_by_date,
    split_meal_items,
    symptom_score_by_date,
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


class TestNormalizeMood:
    """Tests for normalize_mood."""

    @pytest.mark.parametrize(
        "label,expected",
        [("Sad", -1.0), ("Neutral", -0.5), ("Happy", 0.0), ("Very Happy", 0.5), ("Ecstatic", 1.0)],
    )
    def test_labels(self, label, expected):
        """Each recognized label maps to its signed score."""
        assert normalize_mood(label) == expected

    def test_case_insensitive_and_trimmed(self):
        """Labels match regardless of case and surrounding whitespace."""
        assert normalize_mood("  very HAPPY ") == 0.5
        assert normalize_mood("sad") == -1.0

    def test_numeric_scale(self):
        """The 1-5 numeric form maps onto the same scale."""
        assert [normalize_mood(n) for n in range(1, 6)] == [-1.0, -0.5, 0.0, 0.5, 1.0]

    def test_numeric_string(self):
        """Numeric strings are read as numbers."""
        assert normalize_mood("4") == 0.5

    def test_unrecognized_is_none(self):
        """Unknown moods are undefined, never a default zero."""
        assert normalize_mood("Grumpy") is None
        assert normalize_mood(0) is None
        assert normalize_mood(6) is None
        assert normalize_mood("") is None

    def test_parse_mood_raises(self):
        """Strict parsing raises MalformedRecordError."""
        with pytest.raises(MalformedRecordError):
            parse_mood("Grumpy")

    def test_five_point(self):
        """Labels map to their 1-5 ordinal."""
        assert mood_to_five_point("Sad") == 1
        assert mood_to_five_point("Very Happy") == 4
        assert mood_to_five_point(5) == 5
        assert mood_to_five_point("Grumpy") is None

    def test_canonical_label(self):
        """Labels are reported in display form."""
        assert canonical_mood_label("very happy") == "Very Happy"
        assert canonical_mood_label(1) == "Sad"
        assert canonical_mood_label("nope") is None


class TestNormalizeProductivity:
    """Tests for normalize_productivity."""

    def test_five_point_scale(self):
        """On a 1-5 scale the midpoint is 3."""
        assert normalize_productivity(3, 5) == 0
        assert normalize_productivity(5, 5) == 2
        assert normalize_productivity(1, 5) == -2

    def test_ten_point_scale(self):
        """On a 1-10 scale the midpoint is 5."""
        assert normalize_productivity(5, 10) == 0
        assert normalize_productivity(8, 10) == 3

    def test_out_of_scale_rejected(self):
        """Ratings outside 1..scale_max are malformed."""
        with pytest.raises(MalformedRecordError):
            normalize_productivity(7, 5)
        with pytest.raises(MalformedRecordError):
            normalize_productivity(0, 5)


class TestNormalizeBloating:
    """Tests for normalize_bloating."""

    def test_ordinal_map(self):
        """Levels map to 0-3."""
        assert [normalize_bloating(level) for level in ("None", "Mild", "Moderate", "Severe")] == [0, 1, 2, 3]

    def test_unknown_level(self):
        """Unknown levels are malformed."""
        with pytest.raises(MalformedRecordError):
            normalize_bloating("Extreme")


class TestSplitMealItems:
    """Tests for split_meal_items and meal_items."""

    def test_trims_and_drops_empty(self):
        """Tokens are trimmed and empty tokens dropped."""
        assert split_meal_items(" Eggs ,Toast,, , Jam") == ["Eggs", "Toast", "Jam"]

    def test_case_preserved(self):
        """Case is kept as entered."""
        assert split_meal_items("eggs, Eggs") == ["eggs", "Eggs"]

    def test_empty_input(self):
        """None and blank strings give no tokens."""
        assert split_meal_items(None) == []
        assert split_meal_items("   ") == []

    def test_meal_items_slot_order(self):
        """All meal slots contribute, in slot order."""
        record = FoodIntakeRecord(
            log_date=date(2024, 1, 1), breakfast="Eggs", lunch="Rice, Beans", snacks="Apple"
        )
        assert meal_items(record) == ["Eggs", "Rice", "Beans", "Apple"]


class TestPerDateMaps:
    """Tests for the per-date map builders."""

    def test_malformed_moods_skipped(self):
        """Unrecognized moods are dropped, not coerced."""
        records = [
            MoodRecord(log_date=date(2024, 1, 1), mood="Happy"),
            MoodRecord(log_date=date(2024, 1, 2), mood="Grumpy"),
        ]
        assert mood_by_date(records) == {date(2024, 1, 1): 0.0}

    def test_later_record_replaces_earlier(self):
        """A second record for a date replaces the first."""
        records = [
            MoodRecord(log_date=date(2024, 1, 1), mood="Sad"),
            MoodRecord(log_date=date(2024, 1, 1), mood="Ecstatic"),
        ]
        assert mood_by_date(records) == {date(2024, 1, 1): 1.0}

    def test_productivity_uses_configured_scale(self):
        """The configured scale decides the midpoint and valid range."""
        records = [
            ProductivityRecord(log_date=date(2024, 1, 1), productivity=8),
            ProductivityRecord(log_date=date(2024, 1, 2), productivity=11),
        ]
        config = ScoringConfig(productivity_scale_max=10)
        assert productivity_by_date(records, config) == {date(2024, 1, 1): 3.0}
        assert productivity_by_date(records) == {}

    def test_foods_by_date(self):
        """Foods are collected per date."""
        records = [FoodIntakeRecord(log_date=date(2024, 1, 1), breakfast="Eggs, Toast")]
        assert foods_by_date(records) == {date(2024, 1, 1): ["Eggs", "Toast"]}

    def test_symptom_mean_per_date(self):
        """A date's symptom score is the mean over all its reports."""
        records = [
            make_symptom(datetime(2024, 1, 1, 8), bloating="Mild"),
            make_symptom(datetime(2024, 1, 1, 20), bloating="Severe"),
            make_symptom(datetime(2024, 1, 2, 9), bloating="None"),
        ]
        scores = symptom_score_by_date(records, "bloating")
        assert scores == {date(2024, 1, 1): 2.0, date(2024, 1, 2): 0.0}

    def test_symptom_late_evening_local_date(self):
        """A report at 23:30 in New York, stored in UTC, belongs to that evening's date."""
        config = ScoringConfig(timezone="America/New_York")
        records = [make_symptom(datetime(2024, 1, 2, 4, 30, tzinfo=timezone.utc), bloating="Moderate")]

        assert symptom_score_by_date(records, "bloating", config) == {date(2024, 1, 1): 2.0}
        assert symptom_score_by_date(records, "bloating") == {date(2024, 1, 2): 2.0}

    def test_unknown_symptom_type(self):
        """Unknown symptom types are rejected."""
        with pytest.raises(ValueError):
            symptom_score_by_date([], "headache")


class TestScoringConfig:
    """Tests for the immutable scoring configuration."""

    def test_frozen(self):
        """Config instances cannot be mutated."""
        config = ScoringConfig()
        with pytest.raises(ValidationError):
            config.productivity_scale_max = 10

    def test_independent_configs(self):
        """Two scales can be used side by side."""
        assert normalize_productivity(5, ScoringConfig().productivity_scale_max) == 2
        assert normalize_productivity(5, ScoringConfig(productivity_scale_max=10).productivity_scale_max) == 0

    def test_tables_read_only(self):
        """Scoring tables cannot be changed in place."""
        with pytest.raises(TypeError):
            DEFAULT_SCORING.mood_labels["sad"] = 0.0
        with pytest.raises(TypeError):
            ScoringConfig(bloating_levels={"none": 0}).bloating_levels["mild"] = 1
        assert DEFAULT_SCORING.mood_labels["sad"] == -1.0

    def test_custom_tables_copied(self):
        """A config does not follow later changes to the dict it was built from."""
        labels = {"low": -1.0, "high": 1.0}
        config = ScoringConfig(mood_labels=labels)
        labels["low"] = 0.0

        assert normalize_mood("low", config) == -1.0

    def test_unknown_timezone_rejected(self):
        """Timezones must be IANA names."""
        with pytest.raises(ValidationError):
            ScoringConfig(timezone="Mars/Olympus_Mons")


class TestLocalDate:
    """Tests for local_date."""

    def test_aware_timestamp_converted(self):
        """Aware timestamps are moved into the configured zone."""
        moment = datetime(2024, 1, 2, 4, 30, tzinfo=timezone.utc)
        assert local_date(moment, ScoringConfig(timezone="America/New_York")) == date(2024, 1, 1)
        assert local_date(moment, ScoringConfig(timezone="Asia/Tokyo")) == date(2024, 1, 2)

    def test_naive_timestamp_unchanged(self):
        """Naive timestamps keep their own date."""
        moment = datetime(2024, 1, 1, 23, 30)
        assert local_date(moment, ScoringConfig(timezone="Asia/Tokyo")) == date(2024, 1, 1)
