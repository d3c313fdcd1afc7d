"""Trend Alerts - Pure functions flagging notable recent changes.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import date
from typing import Iterable

from .aggregator import mean
from .models import MoodRecord, ScoringConfig, TrendAlert
from .normalizer import DEFAULT_SCORING, mood_to_five_point


# Week-over-week change in the 1-5 mood average, as a fraction of the scale
MOOD_DECREASE_THRESHOLD = -0.5
MOOD_INCREASE_THRESHOLD = 0.4
MOOD_SCALE = 5

# Entries needed before a missed day counts as a broken streak
STREAK_MIN_ENTRIES = 5


def weekly_mood_change(
    moods: Iterable[MoodRecord], today: date, config: ScoringConfig = DEFAULT_SCORING
) -> float:
    """Change of the 1-5 mood average between the last 7 days and the 7 before.

    The current window is today-6..today, the previous one today-13..today-7.
    Returns 0 when either window has no recognized moods.
    """
    current: list[float] = []
    previous: list[float] = []
    for record in moods:
        score = mood_to_five_point(record.mood, config)
        if score is None:
            continue
        age = (today - record.log_date).days
        if 0 <= age <= 6:
            current.append(score)
        elif 7 <= age <= 13:
            previous.append(score)

    if not current or not previous:
        return 0.0
    return (mean(current) - mean(previous)) / MOOD_SCALE


def detect_trend_alerts(
    moods: Iterable[MoodRecord], today: date, config: ScoringConfig = DEFAULT_SCORING
) -> list[TrendAlert]:
    """Alerts for a sharp mood drop, a clear improvement or an at-risk streak.

    Args:
        moods: The user's mood history
        today: Reference date, in the user's calendar
        config: Scoring tables

    Returns:
        Zero or more alerts, mood alerts first
    """
    moods = list(moods)
    alerts: list[TrendAlert] = []

    change = weekly_mood_change(moods, today, config)
    if change < MOOD_DECREASE_THRESHOLD:
        alerts.append(TrendAlert(
            type="mood_decrease",
            severity="high",
            message=f"Your mood has decreased {round(abs(change) * 100)}% this week.",
            recommendation="Consider self-care activities or reaching out to someone you trust.",
        ))
    elif change > MOOD_INCREASE_THRESHOLD:
        alerts.append(TrendAlert(
            type="mood_increase",
            severity="low",
            message="Your mood is improving! Keep up what you're doing.",
        ))

    logged = {r.log_date for r in moods if mood_to_five_point(r.mood, config) is not None}
    if today not in logged and len(logged) > STREAK_MIN_ENTRIES:
        alerts.append(TrendAlert(
            type="streak_break",
            severity="medium",
            message="You haven't logged today. Your streak is at risk!",
            recommendation="Take a moment to reflect and log your entry.",
        ))

    return alerts
