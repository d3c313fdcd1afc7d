"""Recommendation Synthesizer - Rule-based advice strings.

All functions are pure: same input always produces same output, no side effects.
"""

from .models import AnalysisKind, Impact


# Wording per analysis kind: (day type, other day type)
DAY_LABELS: dict[str, tuple[str, str]] = {
    "working": ("working days", "days off"),
    "training": ("training days", "rest days"),
}

QUADRANT_MESSAGES = {
    (True, True): (
        "You feel better and get more done on {days} than on {others}. "
        "That rhythm works for you, so try carrying some of it into your {others}."
    ),
    (False, False): (
        "Both your mood and productivity are lower on {days} than on {others}. "
        "Plan short breaks and something you look forward to on {days}."
    ),
    (True, False): (
        "Your mood is higher on {days}, but you get less done. "
        "Protect a focused block of time on {days} to match how good you feel."
    ),
    (False, True): (
        "You get more done on {days}, but your mood is lower. "
        "Watch your stress levels and leave room to unwind on {days}."
    ),
}

MOOD_ONLY_MESSAGES = {
    True: "Your mood is higher on {days} than on {others}. Notice what those days have in common.",
    False: "Your mood is lower on {days} than on {others}. Plan something you look forward to on {days}.",
}

PRODUCTIVITY_ONLY_MESSAGES = {
    True: "You get more done on {days} than on {others}.",
    False: "You get less done on {days} than on {others}. Protect a focused block of time on {days}.",
}


def comparative_recommendation(
    kind: AnalysisKind,
    mood_diff: float,
    productivity_diff: float,
    significant: bool,
    mood_compared: bool = True,
    productivity_compared: bool = True,
) -> str:
    """Pick advice from the signs of the mood and productivity differences.

    Only metrics with samples on both sides are used. With one such metric
    the advice speaks about that metric alone.

    Args:
        kind: "working" or "training"
        mood_diff: Mood average on the day type minus the other days
        productivity_diff: Same for productivity
        significant: Whether either difference is significant
        mood_compared: Whether both cohorts have mood samples
        productivity_compared: Whether both cohorts have productivity samples

    Returns:
        A quadrant message, a single-metric message, or a neutral message
        when the difference is not significant. A zero diff counts as "up".
    """
    days, others = DAY_LABELS[kind]
    if not mood_compared and not productivity_compared:
        return f"Not enough data yet to compare {days} with {others}. Keep logging both."
    if not significant:
        return f"No significant difference in mood or productivity between {days} and {others}."

    if not productivity_compared:
        template = MOOD_ONLY_MESSAGES[mood_diff >= 0]
    elif not mood_compared:
        template = PRODUCTIVITY_ONLY_MESSAGES[productivity_diff >= 0]
    else:
        template = QUADRANT_MESSAGES[(mood_diff >= 0, productivity_diff >= 0)]
    return template.format(days=days, others=others)


def hydration_recommendation(average_intake: float, mood_impact: Impact, days_logged: int = 1) -> str:
    """Advice scaled by the user's average daily water intake."""
    if days_logged == 0:
        return "Log your water intake to see how hydration affects your mood and productivity."

    glasses = f"{average_intake:.1f}"
    if average_intake < 4:
        message = (
            f"You average only {glasses} glasses of water a day. "
            "Start by adding a glass with every meal and aim for 6-8 glasses."
        )
    elif average_intake < 6:
        message = (
            f"You average {glasses} glasses of water a day. "
            "A couple more glasses would bring you into the healthy 6-8 range."
        )
    elif average_intake < 8:
        message = (
            f"Good job! You average {glasses} glasses of water a day. "
            "One or two more would get you to the ideal 8 glasses."
        )
    else:
        message = f"Excellent hydration! You average {glasses} glasses of water a day. Keep it up."

    if mood_impact == "positive":
        message += " Your mood is noticeably better on well-hydrated days."
    return message


# Substring of a food name -> healthier swaps, checked in order
FOOD_ALTERNATIVES: tuple[tuple[str, list[str]], ...] = (
    ("chocolate", ["berries", "dark chocolate 70%+", "nuts"]),
    ("coffee", ["green tea", "herbal tea", "water"]),
    ("fast food", ["salad", "grilled chicken", "brown rice bowl"]),
    ("soda", ["sparkling water", "fresh juice", "kombucha"]),
    ("sweets", ["fruit", "yogurt with honey", "protein bar"]),
    ("fried", ["baked", "grilled", "steamed"]),
    ("alcohol", ["mocktail", "sparkling cider", "kombucha"]),
    ("processed", ["whole foods", "organic", "homemade"]),
)

DEFAULT_ALTERNATIVES = ["fresh fruits", "vegetables", "nuts"]


def food_alternatives(food: str) -> list[str]:
    """Swaps for a food, matched by the first trigger it contains."""
    name = food.lower()
    for trigger, alternatives in FOOD_ALTERNATIVES:
        if trigger in name:
            return list(alternatives)
    return list(DEFAULT_ALTERNATIVES)


def food_warning(food: str) -> str:
    return f"Eating {food} is often followed by lower moods. Consider alternatives."
