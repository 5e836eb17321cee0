"""
Display-side grading helpers shared by every result view.

The percentage uses half-up rounding so that 2 of 3 shows as 67%. The band is
taken from the unrounded ratio, so 79.5% shows as 80% but stays yellow. The
band thresholds are the ones the feedback review screen colours scores with.
"""

import enum
import math

GREEN_THRESHOLD = 80
YELLOW_THRESHOLD = 60


class ScoreBand(str, enum.Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


def ratio(score: float, total: int) -> float:
    """Unrounded percentage of score over total, 0 when there is nothing to score."""
    if total <= 0:
        return 0.0
    return 100 * score / total


def percentage(score: float, total: int) -> int:
    """Whole-number percentage of score over total, rounded half up."""
    return math.floor(ratio(score, total) + 0.5)


def score_band(percent: float) -> ScoreBand:
    if percent >= GREEN_THRESHOLD:
        return ScoreBand.GREEN
    if percent >= YELLOW_THRESHOLD:
        return ScoreBand.YELLOW
    return ScoreBand.RED


def effective_score(score: int, manual_score: int | None) -> int:
    """A grader's manual score replaces the automatic one for display."""
    return manual_score if manual_score is not None else score
