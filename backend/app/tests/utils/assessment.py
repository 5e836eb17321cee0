from collections.abc import Sequence

from sqlmodel import Session

from app.api.routes.assessment import build_questions
from app.core.scoring import score_answers
from app.models import (
    AnswerMap,
    Assessment,
    QuestionCreate,
    QuestionType,
    Submission,
    User,
)
from app.tests.utils.user import get_superuser
from app.tests.utils.utils import random_lower_string


def multiple_choice_payload(correct_answer: int, option_count: int = 3) -> dict:
    return {
        "prompt": random_lower_string(),
        "question_type": QuestionType.multiple_choice.value,
        "options": [f"Option {i}" for i in range(option_count)],
        "correct_answer": correct_answer,
        "points": 1,
    }


def short_answer_payload(correct_answer: str | None = None) -> dict:
    return {
        "prompt": random_lower_string(),
        "question_type": QuestionType.short_answer.value,
        "correct_answer": correct_answer,
        "points": 2,
    }


def create_random_assessment(
    db: Session,
    *,
    correct_answers: Sequence[int] = (1, 0, 2),
    short_answers: Sequence[str | None] = (),
    duration: int = 1,
    is_active: bool = True,
    category: str | None = "quiz",
    title: str | None = None,
    created_by_id: int | None = None,
) -> Assessment:
    """
    Store an assessment whose multiple-choice questions come first, each with
    three options, followed by the given short-answer questions.
    """
    payloads = [multiple_choice_payload(answer) for answer in correct_answers]
    payloads += [short_answer_payload(answer) for answer in short_answers]

    assessment = Assessment(
        title=title or random_lower_string(),
        description=random_lower_string(),
        category=category,
        duration=duration,
        is_active=is_active,
        created_by_id=created_by_id or get_superuser(db).id,
    )
    assessment.questions = build_questions(
        [QuestionCreate.model_validate(payload) for payload in payloads]
    )
    db.add(assessment)
    db.commit()
    db.refresh(assessment)
    return assessment


def create_submission(
    db: Session, assessment: Assessment, user: User, answers: AnswerMap
) -> Submission:
    """Score and store a hand-in the way the submit endpoint does."""
    result = score_answers(assessment.questions, answers)
    submission = Submission(
        user_id=user.id,
        assessment_id=assessment.id,
        answers={str(index): value for index, value in answers.items()},
        **result.model_dump(),
    )
    db.add(submission)
    db.commit()
    db.refresh(submission)
    return submission
