"""MCP Server - Tool definitions for the insights engine.

Defines the MCP tools that expose each analysis to clients.
Handles authentication via API key in Authorization header.
"""

import logging
import os
from contextvars import ContextVar
from datetime import date

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from ..core.errors import NoDataError
from ..core.models import ScoringConfig
from .firestore_client import InsightsFirestoreClient, FirestoreConfig
from .auth import AuthClient
from .insights_service import InsightsService


logger = logging.getLogger(__name__)

# Context variable to store current user_id per request
current_user_id: ContextVar[str | None] = ContextVar("current_user_id", default=None)

# Configure transport security for Cloud Run deployment
transport_security = TransportSecuritySettings(
    enable_dns_rebinding_protection=True,
    allowed_hosts=[
        "localhost:*",
        "127.0.0.1:*",
        "*.run.app:*",
        "*.run.app",
    ],
)

# Initialize FastMCP server with stateless HTTP for cloud deployments
mcp = FastMCP(
    "wellness-insights",
    instructions="""Wellness Insights - Correlations and weekly insights from a mood journal.

Use these tools to explain how foods, symptoms, work and training days and
hydration relate to the user's mood and productivity.

Start with weekly_insights for an overview of the current week.
Correlation scores are signed: mood ranges from -1 (Sad) to 1 (Ecstatic),
productivity is centered on the middle of the rating scale.
When a tool reports empty data, encourage the user to keep logging.""",
    stateless_http=True,
    transport_security=transport_security,
)

# Lazy-initialized clients
_firestore_client: InsightsFirestoreClient | None = None
_auth_client: AuthClient | None = None
_insights_service: InsightsService | None = None


def get_firestore_client() -> InsightsFirestoreClient:
    """Get or create Firestore client."""
    global _firestore_client
    if _firestore_client is None:
        config = FirestoreConfig(
            project_id=os.environ.get("FIRESTORE_PROJECT"),
            database=os.environ.get("FIRESTORE_DATABASE", "wellness"),
        )
        _firestore_client = InsightsFirestoreClient(config)
    return _firestore_client


def get_auth_client() -> AuthClient:
    """Get or create Auth client."""
    global _auth_client
    if _auth_client is None:
        _auth_client = AuthClient(get_firestore_client().client)
    return _auth_client


def get_insights_service() -> InsightsService:
    """Get or create the insights service."""
    global _insights_service
    if _insights_service is None:
        config = ScoringConfig(
            productivity_scale_max=int(os.environ.get("PRODUCTIVITY_SCALE_MAX", 5)),
            timezone=os.environ.get("USER_TIMEZONE", "UTC"),
        )
        _insights_service = InsightsService(get_firestore_client(), config)
    return _insights_service


def get_user_id() -> str:
    """Get current authenticated user ID.

    Raises:
        NoDataError: If no user is authenticated
    """
    user_id = current_user_id.get()
    if user_id is None:
        raise NoDataError("No authenticated user. Ensure API key is provided.")
    return user_id


def empty_result(error: NoDataError) -> dict:
    """Payload for an empty state."""
    return {"empty": True, "message": str(error)}


# ==================== Correlation Tools ====================


@mcp.tool()
def food_mood_correlation() -> dict:
    """Rank foods by the user's average mood on days they were eaten.

    Returns:
        Dictionary with a "correlations" list of food_name, average_score
        (-1 to 1) and occurrences, best mood first
    """
    try:
        rows = get_insights_service().compute_food_mood_correlation(get_user_id())
    except NoDataError as e:
        return empty_result(e)
    return {"correlations": [r.model_dump() for r in rows]}


@mcp.tool()
def food_productivity_correlation() -> dict:
    """Rank foods by the user's average productivity on days they were eaten.

    Returns:
        Dictionary with a "correlations" list, most productive first
    """
    try:
        rows = get_insights_service().compute_food_productivity_correlation(get_user_id())
    except NoDataError as e:
        return empty_result(e)
    return {"correlations": [r.model_dump() for r in rows]}


@mcp.tool()
def food_symptom_correlation(symptom_type: str) -> dict:
    """Rank foods by the average severity of a symptom on days they were eaten.

    Args:
        symptom_type: One of bloating, energy, stool_consistency, diarrhea,
            nausea, pain

    Returns:
        Dictionary with a "correlations" list, highest score first
    """
    try:
        rows = get_insights_service().compute_food_symptom_correlation(get_user_id(), symptom_type)
    except NoDataError as e:
        return empty_result(e)
    except ValueError as e:
        return {"error": str(e)}
    return {"symptom_type": symptom_type, "correlations": [r.model_dump() for r in rows]}


@mcp.tool()
def weather_mood_correlation() -> dict:
    """Average mood per weather condition.

    Returns:
        Dictionary with a "correlations" list of condition,
        average_mood_score, average_temperature and occurrences
    """
    try:
        rows = get_insights_service().compute_weather_mood_correlation(get_user_id())
    except NoDataError as e:
        return empty_result(e)
    return {"correlations": [r.model_dump() for r in rows]}


@mcp.tool()
def food_mood_impact() -> dict:
    """Judge foods eaten at least twice in the last 30 days by their effect on mood.

    Returns:
        Dictionary with a "foods" list of food_name, impact (positive,
        negative or neutral), mood_change (-1 to 1), occurrences, and for
        foods that lower mood a warning with alternatives
    """
    try:
        rows = get_insights_service().compute_food_mood_impact(get_user_id())
    except NoDataError as e:
        return empty_result(e)
    return {"foods": [r.model_dump() for r in rows]}


# ==================== Lifestyle Tools ====================


@mcp.tool()
def working_day_analysis() -> dict:
    """Compare mood and productivity on working days against days off.

    Returns:
        Dictionary with mood and productivity comparisons, confidence,
        significance and a recommendation
    """
    try:
        result = get_insights_service().compute_working_day_analysis(get_user_id())
    except NoDataError as e:
        return empty_result(e)
    return result.model_dump(mode="json")


@mcp.tool()
def training_day_analysis() -> dict:
    """Compare mood and productivity on training days against rest days.

    Returns:
        Dictionary with mood and productivity comparisons, confidence,
        significance and a recommendation
    """
    try:
        result = get_insights_service().compute_training_day_analysis(get_user_id())
    except NoDataError as e:
        return empty_result(e)
    return result.model_dump(mode="json")


@mcp.tool()
def hydration_analysis() -> dict:
    """Relate daily water intake to mood and productivity.

    Returns:
        Dictionary with per-bucket averages, mood and productivity impact,
        the best intake for mood and a recommendation
    """
    try:
        result = get_insights_service().compute_hydration_analysis(get_user_id())
    except NoDataError as e:
        return empty_result(e)
    return result.model_dump(mode="json")


# ==================== Trend Tools ====================


@mcp.tool()
def mood_trends() -> dict:
    """Weekly mood and productivity averages and the mood pattern by weekday."""
    try:
        result = get_insights_service().compute_mood_trends(get_user_id())
    except NoDataError as e:
        return empty_result(e)
    return result.model_dump(mode="json")


@mcp.tool()
def symptom_trends() -> dict:
    """Bloating per week, energy per meal type and stool type distribution."""
    try:
        result = get_insights_service().compute_symptom_trends(get_user_id())
    except NoDataError as e:
        return empty_result(e)
    return result.model_dump(mode="json")


@mcp.tool()
def trend_alerts() -> dict:
    """Alerts for a sharp mood change this week or a streak at risk.

    Returns:
        Dictionary with an "alerts" list of type, severity, message and
        recommendation
    """
    try:
        alerts = get_insights_service().compute_trend_alerts(get_user_id())
    except NoDataError as e:
        return empty_result(e)
    return {"alerts": [a.model_dump() for a in alerts]}


# ==================== Weekly Insight Tools ====================


@mcp.tool()
def weekly_insights(week_of: str | None = None) -> dict:
    """Generate the weekly summary with ranked insights.

    Args:
        week_of: Any date in the target week, YYYY-MM-DD (defaults to this week)

    Returns:
        Dictionary with week dates, mood, productivity and food summaries,
        streak days and insights sorted by priority
    """
    target = None
    if week_of:
        try:
            target = date.fromisoformat(week_of)
        except ValueError:
            return {"error": "Invalid date format. Use YYYY-MM-DD."}

    try:
        summary = get_insights_service().generate_weekly_insights(get_user_id(), target)
    except NoDataError as e:
        return empty_result(e)
    return summary.model_dump(mode="json")


@mcp.tool()
def latest_weekly_insights() -> dict:
    """The most recent weekly summary, generating this week's if none is stored."""
    try:
        summary = get_insights_service().get_latest_weekly_summary(get_user_id())
    except NoDataError as e:
        return empty_result(e)
    return summary.model_dump(mode="json")


@mcp.tool()
def weekly_insights_history(limit: int = 8) -> dict:
    """Previously generated weekly summaries, newest first.

    Args:
        limit: Maximum number of weeks to return (default: 8)

    Returns:
        Dictionary with a "summaries" list
    """
    if limit < 1:
        return {"error": "limit must be at least 1"}

    try:
        summaries = get_insights_service().get_weekly_summary_history(get_user_id(), limit)
    except NoDataError as e:
        return empty_result(e)
    return {"summaries": [s.model_dump(mode="json") for s in summaries]}
