"""Firestore Client - Read access to a user's logged records.

This module handles all database I/O for the insights engine.
All I/O is contained here; analysis logic is in the core module.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Iterator

from google.cloud import firestore
from pydantic import BaseModel, ValidationError

from ..core.models import (
    FoodIntakeRecord,
    MoodRecord,
    ProductivityRecord,
    SymptomRecord,
    WeatherRecord,
    WeeklySummary,
    WorkProfile,
)


logger = logging.getLogger(__name__)


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
    """

    project_id: str | None = None
    database: str | None = None


class InsightsFirestoreClient:
    """Client for reading a user's wellness records from Firestore.

    Document structure per user:
        users/{user_id}/
            profile/work: { working_days, sport_days }
            moods/{YYYY-MM-DD}: { log_date, mood }
            productivity/{YYYY-MM-DD}: { log_date, productivity }
            food_intakes/{YYYY-MM-DD}: { log_date, breakfast, ..., water_intake }
            symptoms/{id}: { created_at, bloating, energy, ... }
            weather/{YYYY-MM-DD}: { log_date, temperature, condition, ... }
            weekly_summaries/{week_start}: cached WeeklySummary

    Dated records use the date as document ID, so re-saving a day replaces it.
    Read failures propagate to the caller; documents that fail validation
    are logged and skipped.
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore client.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs: dict[str, Any] = {}
            if self.config.project_id:
                kwargs["project"] = self.config.project_id
            if self.config.database:
                kwargs["database"] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _user_ref(self, user_id: str) -> firestore.DocumentReference:
        """Get reference to user document."""
        return self.client.collection("users").document(user_id)

    def _dated_query(
        self, user_id: str, collection: str, start: date | None, end: date | None
    ) -> firestore.Query:
        """Query a date-keyed collection over an optional inclusive range."""
        query = self._user_ref(user_id).collection(collection)
        if start is not None:
            query = query.where("log_date", ">=", start.isoformat())
        if end is not None:
            query = query.where("log_date", "<=", end.isoformat())
        return query.order_by("log_date")

    def _parse(
        self, docs: Iterator, model: type[BaseModel], kind: str, id_field: str | None = None
    ) -> list:
        """Convert documents to models, skipping ones that fail validation.

        When id_field is given, the document ID fills that field unless the
        body already carries it.
        """
        records = []
        for doc in docs:
            data = doc.to_dict() or {}
            if id_field:
                data.setdefault(id_field, doc.id)
            try:
                # Dates are stored as ISO strings
                if isinstance(data.get("log_date"), str):
                    data["log_date"] = date.fromisoformat(data["log_date"])
                records.append(model(**data))
            except (ValidationError, ValueError) as e:
                logger.warning("Skipping malformed %s document %s: %s", kind, doc.id, e)
        return records

    # ==================== Record Reads ====================

    def fetch_mood_records(
        self, user_id: str, start: date | None = None, end: date | None = None
    ) -> list[MoodRecord]:
        """Fetch mood ratings, ordered by date.

        Args:
            user_id: The user's ID
            start: Start of range (inclusive), None for all history
            end: End of range (inclusive), None for all history

        Returns:
            List of MoodRecords found (may be empty)
        """
        logger.debug("Fetching moods for %s from %s to %s", user_id[:8], start, end)
        docs = self._dated_query(user_id, "moods", start, end).stream()
        return self._parse(docs, MoodRecord, "mood")

    def fetch_productivity_records(
        self, user_id: str, start: date | None = None, end: date | None = None
    ) -> list[ProductivityRecord]:
        """Fetch productivity ratings, ordered by date."""
        logger.debug("Fetching productivity for %s from %s to %s", user_id[:8], start, end)
        docs = self._dated_query(user_id, "productivity", start, end).stream()
        return self._parse(docs, ProductivityRecord, "productivity")

    def fetch_food_intake_records(
        self, user_id: str, start: date | None = None, end: date | None = None
    ) -> list[FoodIntakeRecord]:
        """Fetch food intake records, ordered by date."""
        logger.debug("Fetching food intakes for %s from %s to %s", user_id[:8], start, end)
        docs = self._dated_query(user_id, "food_intakes", start, end).stream()
        return self._parse(docs, FoodIntakeRecord, "food intake")

    def fetch_weather_records(
        self, user_id: str, start: date | None = None, end: date | None = None
    ) -> list[WeatherRecord]:
        """Fetch weather observations, ordered by date."""
        logger.debug("Fetching weather for %s from %s to %s", user_id[:8], start, end)
        docs = self._dated_query(user_id, "weather", start, end).stream()
        return self._parse(docs, WeatherRecord, "weather")

    def fetch_symptom_records(
        self,
        user_id: str,
        start: date | None = None,
        end: date | None = None,
        tz: tzinfo | None = None,
    ) -> list[SymptomRecord]:
        """Fetch symptom reports created within the range, oldest first.

        Symptom reports carry a timestamp rather than a date, so the range
        covers whole local days: midnight of start up to midnight after end,
        both in tz. The report ID is the document ID.
        """
        logger.debug("Fetching symptoms for %s from %s to %s", user_id[:8], start, end)
        query = self._user_ref(user_id).collection("symptoms")
        if start is not None:
            query = query.where("created_at", ">=", datetime.combine(start, time.min, tzinfo=tz))
        if end is not None:
            query = query.where(
                "created_at", "<", datetime.combine(end + timedelta(days=1), time.min, tzinfo=tz)
            )
        return self._parse(query.order_by("created_at").stream(), SymptomRecord, "symptom", id_field="id")

    def fetch_work_profile(self, user_id: str) -> WorkProfile:
        """Fetch the user's working and sport days.

        Returns:
            Stored WorkProfile, or the Monday-Friday default if none is stored
        """
        logger.debug("Fetching work profile for %s", user_id[:8])
        doc = self._user_ref(user_id).collection("profile").document("work").get()
        if not doc.exists:
            return WorkProfile()
        try:
            return WorkProfile(**doc.to_dict())
        except ValidationError as e:
            logger.warning("Invalid work profile for %s, using default: %s", user_id[:8], e)
            return WorkProfile()

    # ==================== Summary Cache ====================

    def save_weekly_summary(self, user_id: str, summary: WeeklySummary) -> bool:
        """Cache a weekly summary, replacing any earlier one for the same week.

        Args:
            user_id: The user's ID
            summary: The summary to save

        Returns:
            True if successful
        """
        week_id = summary.week_start_date.isoformat()
        logger.info("Saving weekly summary for %s, week of %s", user_id[:8], week_id)
        try:
            data = summary.model_dump(mode="json")
            data["generated_at"] = datetime.utcnow()
            self._user_ref(user_id).collection("weekly_summaries").document(week_id).set(data)
            return True
        except Exception as e:
            logger.error("Failed to save weekly summary: %s", str(e))
            return False

    def fetch_weekly_summaries(self, user_id: str, limit: int | None = None) -> list[WeeklySummary]:
        """Fetch cached weekly summaries, newest week first.

        Args:
            user_id: The user's ID
            limit: Maximum number of summaries, None for all

        Returns:
            List of WeeklySummary (may be empty)
        """
        logger.debug("Fetching weekly summaries for %s (limit %s)", user_id[:8], limit)
        query = self._user_ref(user_id).collection("weekly_summaries").order_by(
            "week_start_date", direction=firestore.Query.DESCENDING
        )
        if limit is not None:
            query = query.limit(limit)
        return self._parse(query.stream(), WeeklySummary, "weekly summary")
