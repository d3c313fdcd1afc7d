"""Tests for the Firestore read client against a mocked Firestore."""

from datetime import date, datetime, timezone
from unittest.mock import MagicMock, patch
from zoneinfo import ZoneInfo

import pytest

from wellness_insights.core.models import FoodSummary, MoodSummary, ProductivitySummary, WeeklySummary
from wellness_insights.shell.firestore_client import InsightsFirestoreClient


def make_doc(doc_id, data, exists=True):
    doc = MagicMock()
    doc.id = doc_id
    doc.exists = exists
    doc.to_dict.return_value = data
    return doc


@pytest.fixture
def db():
    """Read client wired to a MagicMock Firestore."""
    client = InsightsFirestoreClient()
    client._client = MagicMock()
    return client


class TestRecordReads:
    """Tests for the record fetchers."""

    def test_mood_records_parsed(self, db):
        """Stored ISO dates are parsed into MoodRecords."""
        query = db._client.collection.return_value.document.return_value.collection.return_value
        query.order_by.return_value.stream.return_value = [
            make_doc("2024-01-01", {"log_date": "2024-01-01", "mood": "Happy"}),
            make_doc("2024-01-02", {"log_date": "2024-01-02", "mood": 4}),
        ]

        records = db.fetch_mood_records("user-123456789")

        assert [r.log_date for r in records] == [date(2024, 1, 1), date(2024, 1, 2)]
        assert records[1].mood == 4
        db._client.collection.assert_called_with("users")

    def test_malformed_documents_skipped(self, db):
        """Documents that fail validation are logged and skipped."""
        query = db._client.collection.return_value.document.return_value.collection.return_value
        query.order_by.return_value.stream.return_value = [
            make_doc("bad-date", {"log_date": "yesterday", "productivity": 3}),
            make_doc("missing", {"log_date": "2024-01-02"}),
            make_doc("2024-01-03", {"log_date": "2024-01-03", "productivity": 3}),
        ]

        records = db.fetch_productivity_records("user-123456789")

        assert [r.log_date for r in records] == [date(2024, 1, 3)]

    def test_date_range_filters(self, db):
        """Range bounds are applied as inclusive ISO date filters."""
        collection = db._client.collection.return_value.document.return_value.collection.return_value
        collection.where.return_value.where.return_value.order_by.return_value.stream.return_value = []

        db.fetch_food_intake_records("user-123456789", date(2024, 1, 1), date(2024, 1, 7))

        collection.where.assert_called_once_with("log_date", ">=", "2024-01-01")
        collection.where.return_value.where.assert_called_once_with("log_date", "<=", "2024-01-07")
        collection.where.return_value.where.return_value.order_by.assert_called_once_with("log_date")

    def test_symptom_range_covers_whole_days(self, db):
        """Symptom ranges run from midnight to the start of the next day."""
        collection = db._client.collection.return_value.document.return_value.collection.return_value
        collection.where.return_value.where.return_value.order_by.return_value.stream.return_value = [
            make_doc("s1", {"created_at": datetime(2024, 1, 2, 9), "energy": 3, "stool_consistency": 4}),
        ]

        records = db.fetch_symptom_records("user-123456789", date(2024, 1, 1), date(2024, 1, 7))

        assert records[0].id == "s1"
        collection.where.assert_called_once_with("created_at", ">=", datetime(2024, 1, 1))
        collection.where.return_value.where.assert_called_once_with("created_at", "<", datetime(2024, 1, 8))

    def test_symptom_id_from_document(self, db):
        """Report bodies do not store their ID; the document ID is used."""
        query = db._client.collection.return_value.document.return_value.collection.return_value
        query.order_by.return_value.stream.return_value = [
            make_doc("abc", {"created_at": datetime(2024, 1, 2, 9), "energy": 3, "stool_consistency": 4}),
            make_doc("def", {"id": "kept", "created_at": datetime(2024, 1, 3, 9), "energy": 2, "stool_consistency": 5}),
        ]

        records = db.fetch_symptom_records("user-123456789")

        assert [r.id for r in records] == ["abc", "kept"]

    def test_symptom_range_in_user_timezone(self, db):
        """With a timezone the range runs between local midnights."""
        collection = db._client.collection.return_value.document.return_value.collection.return_value
        collection.where.return_value.where.return_value.order_by.return_value.stream.return_value = []
        tz = ZoneInfo("America/New_York")

        db.fetch_symptom_records("user-123456789", date(2024, 1, 1), date(2024, 1, 1), tz=tz)

        lower = collection.where.call_args[0][2]
        upper = collection.where.return_value.where.call_args[0][2]
        assert lower == datetime(2024, 1, 1, 5, tzinfo=timezone.utc)
        assert upper == datetime(2024, 1, 2, 5, tzinfo=timezone.utc)

    def test_read_errors_propagate(self, db):
        """Storage failures are not swallowed."""
        query = db._client.collection.return_value.document.return_value.collection.return_value
        query.order_by.return_value.stream.side_effect = RuntimeError("unavailable")

        with pytest.raises(RuntimeError):
            db.fetch_weather_records("user-123456789")


class TestWorkProfile:
    """Tests for fetch_work_profile."""

    def test_stored_profile(self, db):
        """A stored profile is returned as-is."""
        profile_doc = db._client.collection.return_value.document.return_value.collection.return_value.document
        profile_doc.return_value.get.return_value = make_doc(
            "work", {"working_days": ["Monday"], "sport_days": ["Saturday"]}
        )

        profile = db.fetch_work_profile("user-123456789")

        assert profile.working_days == ["Monday"]
        assert profile.sport_days == ["Saturday"]
        profile_doc.assert_called_with("work")

    def test_missing_profile_defaults(self, db):
        """Without a stored profile the Monday-Friday default is used."""
        profile_doc = db._client.collection.return_value.document.return_value.collection.return_value.document
        profile_doc.return_value.get.return_value = make_doc("work", None, exists=False)

        assert len(db.fetch_work_profile("user-123456789").working_days) == 5

    def test_invalid_profile_defaults(self, db):
        """An invalid stored profile falls back to the default."""
        profile_doc = db._client.collection.return_value.document.return_value.collection.return_value.document
        profile_doc.return_value.get.return_value = make_doc("work", {"working_days": "Monday"})

        assert db.fetch_work_profile("user-123456789").sport_days == []


class TestSaveWeeklySummary:
    """Tests for save_weekly_summary."""

    def make_summary(self):
        return WeeklySummary(
            week_start_date=date(2024, 1, 8),
            week_end_date=date(2024, 1, 14),
            insights=[],
            mood_summary=MoodSummary(average_mood=0, most_common_mood="No data", mood_trend="stable", entries_count=0),
            productivity_summary=ProductivitySummary(average_productivity=0, productivity_trend="stable", entries_count=0),
            food_summary=FoodSummary(diversity_score=0, total_meals_logged=0),
            streak_days=0,
        )

    def test_saved_under_week_start(self, db):
        """Summaries are keyed by the week's Monday."""
        summaries = db._client.collection.return_value.document.return_value.collection.return_value

        assert db.save_weekly_summary("user-123456789", self.make_summary()) is True

        summaries.document.assert_called_with("2024-01-08")
        saved = summaries.document.return_value.set.call_args[0][0]
        assert saved["week_start_date"] == "2024-01-08"
        assert "generated_at" in saved

    def test_save_failure_returns_false(self, db):
        """A failed write is reported, not raised."""
        summaries = db._client.collection.return_value.document.return_value.collection.return_value
        summaries.document.return_value.set.side_effect = RuntimeError("unavailable")

        assert db.save_weekly_summary("user-123456789", self.make_summary()) is False


class TestFetchWeeklySummaries:
    """Tests for fetch_weekly_summaries."""

    def stored(self, week_start, week_end):
        return {
            "week_start_date": week_start,
            "week_end_date": week_end,
            "insights": [],
            "mood_summary": {"average_mood": 3.5, "most_common_mood": "Happy", "mood_trend": "stable", "entries_count": 2},
            "productivity_summary": {"average_productivity": 0, "productivity_trend": "stable", "entries_count": 0},
            "food_summary": {"diversity_score": 0, "total_meals_logged": 0, "top_foods": []},
            "streak_days": 2,
            "generated_at": datetime(2024, 1, 15, 8),
        }

    def test_newest_first_with_limit(self, db):
        """Summaries are read newest week first, limited on request."""
        summaries = db._client.collection.return_value.document.return_value.collection.return_value
        ordered = summaries.order_by.return_value
        ordered.limit.return_value.stream.return_value = [
            make_doc("2024-01-08", self.stored("2024-01-08", "2024-01-14")),
        ]

        with patch("wellness_insights.shell.firestore_client.firestore") as mock_fs:
            result = db.fetch_weekly_summaries("user-123456789", limit=1)

        summaries.order_by.assert_called_once_with(
            "week_start_date", direction=mock_fs.Query.DESCENDING
        )
        ordered.limit.assert_called_once_with(1)
        assert [s.week_start_date for s in result] == [date(2024, 1, 8)]
        assert result[0].mood_summary.most_common_mood == "Happy"

    def test_all_summaries_without_limit(self, db):
        """Without a limit every stored week is returned."""
        summaries = db._client.collection.return_value.document.return_value.collection.return_value
        ordered = summaries.order_by.return_value
        ordered.stream.return_value = [
            make_doc("2024-01-08", self.stored("2024-01-08", "2024-01-14")),
            make_doc("2024-01-01", self.stored("2024-01-01", "2024-01-07")),
        ]

        result = db.fetch_weekly_summaries("user-123456789")

        ordered.limit.assert_not_called()
        assert [s.week_end_date for s in result] == [date(2024, 1, 14), date(2024, 1, 7)]

    def test_malformed_summary_skipped(self, db):
        """Stored summaries that no longer validate are skipped."""
        summaries = db._client.collection.return_value.document.return_value.collection.return_value
        summaries.order_by.return_value.stream.return_value = [
            make_doc("2024-01-08", {"week_start_date": "2024-01-08"}),
        ]

        assert db.fetch_weekly_summaries("user-123456789") == []
