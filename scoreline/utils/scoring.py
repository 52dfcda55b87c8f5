"""
Points arithmetic for predictions.

- Exact score: 3 base points
- Correct outcome (home win / draw / away win): 1 base point
- Joker: doubles the base points, but only when the base points are above zero
"""

import logging
import math
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

EXACT_SCORE_POINTS = 3
CORRECT_OUTCOME_POINTS = 1
JOKER_MULTIPLIER = 2

HOME_WIN = "H"
DRAW = "D"
AWAY_WIN = "A"


def _as_goals(value: Any) -> Optional[float]:
    """Coerce a goal count to a number; None for missing, non-numeric or negative values."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or number < 0:
        return None
    return number


def outcome(home: Any, away: Any) -> Optional[str]:
    """Match outcome as H, D or A; None when either side is unknown."""
    home_goals = _as_goals(home)
    away_goals = _as_goals(away)
    if home_goals is None or away_goals is None:
        return None
    if home_goals > away_goals:
        return HOME_WIN
    if home_goals < away_goals:
        return AWAY_WIN
    return DRAW


def is_exact_score(prediction: Mapping[str, Any], result: Mapping[str, Any]) -> bool:
    pred_home = _as_goals(prediction.get("predicted_home_goals"))
    pred_away = _as_goals(prediction.get("predicted_away_goals"))
    if pred_home is None or pred_away is None:
        return False
    return (pred_home, pred_away) == (_as_goals(result.get("home_score")), _as_goals(result.get("away_score")))


def calculate_points(prediction: Mapping[str, Any], result: Mapping[str, Any]) -> int:
    """Points awarded for one prediction against the actual fixture result.

    `prediction` needs predicted_home_goals, predicted_away_goals and optionally
    is_joker; `result` needs home_score and away_score. Missing or invalid
    scores on either side award 0.
    """
    raw = (
        prediction.get("predicted_home_goals"),
        prediction.get("predicted_away_goals"),
        result.get("home_score"),
        result.get("away_score"),
    )
    if any(v is None for v in raw):
        # Not predicted, or result not entered yet
        return 0
    values = tuple(_as_goals(v) for v in raw)
    if any(v is None for v in values):
        logger.error(f"Invalid score values during point calculation: {raw}")
        return 0

    pred_home, pred_away, actual_home, actual_away = values
    if pred_home == actual_home and pred_away == actual_away:
        base_points = EXACT_SCORE_POINTS
    elif outcome(pred_home, pred_away) == outcome(actual_home, actual_away):
        base_points = CORRECT_OUTCOME_POINTS
    else:
        base_points = 0

    if prediction.get("is_joker") is True and base_points > 0:
        return base_points * JOKER_MULTIPLIER
    return base_points
