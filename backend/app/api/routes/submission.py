import logging
from collections.abc import Sequence
from typing import cast

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi_pagination import Page
from fastapi_pagination.ext.sqlmodel import paginate
from sqlmodel import Session, col, select

from app.api.deps import (
    CurrentUser,
    Pagination,
    SessionDep,
    permission_dependency,
    user_has_permission,
)
from app.api.routes.utils import apply_ordering, get_current_time
from app.models import (
    FeedbackUpdate,
    Submission,
    SubmissionPublic,
    User,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/submission", tags=["Submission"])

SubmissionSortConfig = {
    "submitted_at": Submission.submitted_at,
    "score": Submission.score,
    "manual_score": Submission.manual_score,
    "feedback_provided_at": Submission.feedback_provided_at,
}


def to_submission_public(session: Session, submission: Submission) -> SubmissionPublic:
    grader = (
        session.get(User, submission.feedback_provided_by_id)
        if submission.feedback_provided_by_id
        else None
    )
    return SubmissionPublic(
        **submission.model_dump(),
        student_name=submission.user.full_name if submission.user else None,
        student_email=submission.user.email if submission.user else None,
        assessment_title=submission.assessment.title
        if submission.assessment
        else None,
        feedback_provided_by_name=grader.full_name if grader else None,
    )


def get_submission_or_404(session: Session, submission_id: int) -> Submission:
    submission = session.get(Submission, submission_id)
    if not submission:
        raise HTTPException(status_code=404, detail="Submission not found")
    return submission


@router.get(
    "/",
    response_model=Page[SubmissionPublic],
    dependencies=[Depends(permission_dependency("read_submission"))],
)
def get_submissions(
    session: SessionDep,
    params: Pagination = Depends(),
    assessment_id: int | None = None,
    user_id: int | None = None,
    has_feedback: bool | None = None,
    order_by: list[str] = Query(
        default=["-submitted_at"],
        title="Order by",
        description="Order by fields",
        examples=["-submitted_at", "score"],
    ),
) -> Page[SubmissionPublic]:
    """
    Submissions for review, newest first unless ordered otherwise.
    """
    query = select(Submission)

    if assessment_id is not None:
        query = query.where(Submission.assessment_id == assessment_id)

    if user_id is not None:
        query = query.where(Submission.user_id == user_id)

    if has_feedback is True:
        query = query.where(col(Submission.feedback).is_not(None))
    elif has_feedback is False:
        query = query.where(col(Submission.feedback).is_(None))

    query = apply_ordering(query, order_by, SubmissionSortConfig)

    return cast(
        Page[SubmissionPublic],
        paginate(
            session,
            query,
            params,
            transformer=lambda items: [
                to_submission_public(session, submission) for submission in items
            ],
        ),
    )


@router.get("/me", response_model=list[SubmissionPublic])
def get_my_submissions(
    session: SessionDep, current_user: CurrentUser
) -> list[SubmissionPublic]:
    submissions: Sequence[Submission] = session.exec(
        select(Submission)
        .where(Submission.user_id == current_user.id)
        .order_by(col(Submission.submitted_at).desc())
    ).all()
    return [to_submission_public(session, submission) for submission in submissions]


@router.get("/{submission_id}", response_model=SubmissionPublic)
def get_submission_by_id(
    submission_id: int, session: SessionDep, current_user: CurrentUser
) -> SubmissionPublic:
    submission = get_submission_or_404(session, submission_id)
    if submission.user_id != current_user.id and not user_has_permission(
        session, current_user, "read_submission"
    ):
        raise HTTPException(status_code=403, detail="User Not Permitted")
    return to_submission_public(session, submission)


@router.put(
    "/{submission_id}/feedback",
    response_model=SubmissionPublic,
    dependencies=[Depends(permission_dependency("grade_submission"))],
)
def save_feedback(
    submission_id: int,
    feedback_update: FeedbackUpdate,
    session: SessionDep,
    current_user: CurrentUser,
) -> SubmissionPublic:
    """
    Store the grader's feedback and optional manual score.

    The automatic score is kept as it was; an empty manual score falls back to it.
    """
    submission = get_submission_or_404(session, submission_id)

    manual_score = feedback_update.manual_score
    if manual_score is not None and manual_score > submission.total_questions:
        raise HTTPException(
            status_code=400,
            detail=f"Manual score cannot be greater than total questions ({submission.total_questions})",
        )

    feedback = (feedback_update.feedback or "").strip() or None
    submission.feedback = feedback
    submission.manual_score = manual_score
    submission.feedback_provided_by_id = current_user.id
    submission.feedback_provided_at = get_current_time()
    session.add(submission)
    session.commit()
    session.refresh(submission)

    logger.info(
        "Feedback saved on submission %s by user %s (manual score: %s)",
        submission.id,
        current_user.id,
        manual_score,
    )
    return to_submission_public(session, submission)
