"""
Automatic scoring of a hand-in against the assessment's question list.

The score counts correctly answered questions, so it never exceeds the number
of questions. Unanswered questions count as incorrect and stay in the total.
Multiple-choice answers must match the correct option index exactly. A
short answer is only auto-graded when the question carries an expected text;
it then has to match after trimming and case folding, otherwise the question
scores zero and is left to the grader's manual score.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from sqlmodel import SQLModel

from app.models.assessment import QuestionBase, QuestionType

logger = logging.getLogger(__name__)


class ScoreResult(SQLModel):
    score: int
    total_questions: int
    points_obtained: float
    points_maximum: float


def normalize_text(value: str) -> str:
    return " ".join(value.split()).casefold()


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def is_correct(question: QuestionBase, value: Any) -> bool:
    if is_blank(value):
        return False

    if question.question_type == QuestionType.multiple_choice:
        expected = question.correct_answer
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        return isinstance(expected, int) and value == expected

    expected = question.correct_answer
    if not isinstance(expected, str) or is_blank(expected):
        return False
    return isinstance(value, str) and normalize_text(value) == normalize_text(expected)


def score_answers(
    questions: Sequence[QuestionBase], answers: Mapping[int, Any]
) -> ScoreResult:
    """
    Score answers keyed by question index against the ordered questions.

    Keys outside the question range are ignored.
    """
    score = 0
    points_obtained = 0.0
    points_maximum = 0.0
    for index, question in enumerate(questions):
        points_maximum += question.points
        if is_correct(question, answers.get(index)):
            score += 1
            points_obtained += question.points

    ignored = [key for key in answers if not 0 <= key < len(questions)]
    if ignored:
        logger.warning("Ignoring answers for unknown question indexes %s", ignored)

    return ScoreResult(
        score=score,
        total_questions=len(questions),
        points_obtained=points_obtained,
        points_maximum=points_maximum,
    )
