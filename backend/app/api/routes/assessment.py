import logging
from typing import cast

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi_pagination import Page
from fastapi_pagination.ext.sqlmodel import paginate
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, exists, func, not_, select

from app.api.deps import (
    CurrentUser,
    Pagination,
    SessionDep,
    permission_dependency,
    user_has_permission,
)
from app.api.routes.utils import apply_ordering, get_current_time
from app.core.scoring import score_answers
from app.models import (
    Assessment,
    AssessmentCreate,
    AssessmentPublic,
    AssessmentQuestion,
    AssessmentSummary,
    AssessmentTake,
    AssessmentUpdate,
    Message,
    QuestionCreate,
    QuestionPublic,
    QuestionTakerPublic,
    Submission,
    SubmissionRequest,
    SubmissionResult,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assessment", tags=["Assessment"])

AssessmentSortConfig = {
    "title": Assessment.title,
    "category": Assessment.category,
    "duration": Assessment.duration,
    "created_date": Assessment.created_date,
    "modified_date": Assessment.modified_date,
}


def get_assessment_or_404(session: Session, assessment_id: int) -> Assessment:
    assessment = session.get(Assessment, assessment_id)
    if not assessment or assessment.is_deleted:
        raise HTTPException(status_code=404, detail="Assessment not found")
    return assessment


def get_open_assessment_or_404(session: Session, assessment_id: int) -> Assessment:
    assessment = session.get(Assessment, assessment_id)
    if not assessment or assessment.is_deleted or not assessment.is_active:
        raise HTTPException(
            status_code=404, detail="Assessment not found or not active"
        )
    return assessment


def has_submitted(session: Session, user_id: int | None, assessment_id: int) -> bool:
    return bool(
        session.scalar(
            select(
                exists().where(
                    Submission.user_id == user_id,
                    Submission.assessment_id == assessment_id,
                )
            )
        )
    )


def build_questions(questions: list[QuestionCreate]) -> list[AssessmentQuestion]:
    # position is the index the taker's answers are keyed by
    return [
        AssessmentQuestion(**question.model_dump(), position=index)
        for index, question in enumerate(questions)
    ]


def to_assessment_public(assessment: Assessment) -> AssessmentPublic:
    questions = [QuestionPublic.model_validate(q) for q in assessment.questions]
    return AssessmentPublic(
        **assessment.model_dump(),
        questions=questions,
        total_questions=len(questions),
    )


def to_assessment_summary(assessment: Assessment) -> AssessmentSummary:
    return AssessmentSummary(
        **assessment.model_dump(),
        total_questions=len(assessment.questions),
    )


# Create an Assessment
@router.post(
    "/",
    response_model=AssessmentPublic,
    dependencies=[Depends(permission_dependency("create_assessment"))],
)
def create_assessment(
    assessment_create: AssessmentCreate,
    session: SessionDep,
    current_user: CurrentUser,
) -> AssessmentPublic:
    assessment_data = assessment_create.model_dump(exclude={"questions"})
    assessment_data["created_by_id"] = current_user.id
    assessment = Assessment.model_validate(assessment_data)
    assessment.questions = build_questions(assessment_create.questions)
    session.add(assessment)
    session.commit()
    session.refresh(assessment)
    logger.info(
        "Assessment %s created by user %s with %d questions",
        assessment.id,
        current_user.id,
        len(assessment.questions),
    )
    return to_assessment_public(assessment)


# Browse the catalog
@router.get(
    "/",
    response_model=Page[AssessmentSummary],
    dependencies=[Depends(permission_dependency("read_assessment"))],
)
def get_assessments(
    session: SessionDep,
    current_user: CurrentUser,
    params: Pagination = Depends(),
    title: str | None = None,
    category: str | None = None,
    is_active: bool | None = None,
    created_by: list[int] | None = Query(None),
    order_by: list[str] = Query(
        default=["-created_date"],
        title="Order by",
        description="Order by fields",
        examples=["-created_date", "title"],
    ),
) -> Page[AssessmentSummary]:
    query = select(Assessment).where(not_(Assessment.is_deleted))

    # Takers only ever see assessments they can start
    if not user_has_permission(session, current_user, "read_assessment_answers"):
        is_active = True

    if is_active is not None:
        query = query.where(Assessment.is_active == is_active)

    if title is not None:
        query = query.where(func.lower(Assessment.title).like(f"%{title.lower()}%"))

    if category is not None:
        query = query.where(func.lower(Assessment.category) == category.lower())

    if created_by:
        query = query.where(col(Assessment.created_by_id).in_(created_by))

    query = apply_ordering(query, order_by, AssessmentSortConfig)

    return cast(
        Page[AssessmentSummary],
        paginate(
            session,
            query,
            params,
            transformer=lambda items: [to_assessment_summary(a) for a in items],
        ),
    )


# Full definition, correct answers included
@router.get(
    "/{assessment_id}",
    response_model=AssessmentPublic,
    dependencies=[Depends(permission_dependency("read_assessment_answers"))],
)
def get_assessment_by_id(assessment_id: int, session: SessionDep) -> AssessmentPublic:
    return to_assessment_public(get_assessment_or_404(session, assessment_id))


# Definition for the taker, without correct answers
@router.get(
    "/{assessment_id}/take",
    response_model=AssessmentTake,
    dependencies=[Depends(permission_dependency("read_assessment"))],
)
def get_assessment_for_taker(
    assessment_id: int, session: SessionDep, current_user: CurrentUser
) -> AssessmentTake:
    assessment = get_open_assessment_or_404(session, assessment_id)
    if has_submitted(session, current_user.id, assessment.id):
        raise HTTPException(status_code=400, detail="Assessment already submitted")

    questions = [
        QuestionTakerPublic.model_validate(q, from_attributes=True)
        for q in assessment.questions
    ]
    return AssessmentTake(
        id=assessment.id,
        title=assessment.title,
        description=assessment.description,
        category=assessment.category,
        duration=assessment.duration,
        questions=questions,
        total_questions=len(questions),
    )


@router.put(
    "/{assessment_id}",
    response_model=AssessmentPublic,
    dependencies=[Depends(permission_dependency("update_assessment"))],
)
def update_assessment(
    assessment_id: int,
    assessment_update: AssessmentUpdate,
    session: SessionDep,
) -> AssessmentPublic:
    assessment = get_assessment_or_404(session, assessment_id)

    if assessment_update.questions is not None:
        # answers are keyed by position, so questions are frozen once handed in
        if assessment.submissions:
            raise HTTPException(
                status_code=422,
                detail="Cannot change questions. One or more submissions already exist.",
            )
        assessment.questions.clear()
        session.flush()
        assessment.questions = build_questions(assessment_update.questions)

    assessment.sqlmodel_update(assessment_update.model_dump(exclude={"questions"}))
    session.add(assessment)
    session.commit()
    session.refresh(assessment)
    return to_assessment_public(assessment)


# Set Visibility of an Assessment
@router.patch(
    "/{assessment_id}",
    response_model=AssessmentPublic,
    dependencies=[Depends(permission_dependency("update_assessment"))],
)
def visibility_assessment(
    assessment_id: int,
    session: SessionDep,
    is_active: bool = Query(False, description="Set visibility of Assessment"),
) -> AssessmentPublic:
    assessment = get_assessment_or_404(session, assessment_id)
    assessment.is_active = is_active
    session.add(assessment)
    session.commit()
    session.refresh(assessment)
    return to_assessment_public(assessment)


@router.delete(
    "/{assessment_id}",
    dependencies=[Depends(permission_dependency("delete_assessment"))],
)
def delete_assessment(assessment_id: int, session: SessionDep) -> Message:
    assessment = get_assessment_or_404(session, assessment_id)
    assessment.is_deleted = True
    session.add(assessment)
    session.commit()
    return Message(message="Assessment deleted successfully")


# Hand in answers and get the automatic score back
@router.post(
    "/{assessment_id}/submit",
    response_model=SubmissionResult,
    dependencies=[Depends(permission_dependency("take_assessment"))],
)
def submit_assessment(
    assessment_id: int,
    submission_request: SubmissionRequest,
    session: SessionDep,
    current_user: CurrentUser,
) -> SubmissionResult:
    assessment = get_open_assessment_or_404(session, assessment_id)
    if has_submitted(session, current_user.id, assessment.id):
        raise HTTPException(status_code=400, detail="Assessment already submitted")

    answers = submission_request.answers
    result = score_answers(assessment.questions, answers)
    submission = Submission(
        user_id=current_user.id,
        assessment_id=assessment.id,
        answers={str(index): value for index, value in answers.items()},
        score=result.score,
        total_questions=result.total_questions,
        points_obtained=result.points_obtained,
        points_maximum=result.points_maximum,
        submitted_at=get_current_time(),
    )
    session.add(submission)
    try:
        session.commit()
    except IntegrityError:
        # a concurrent hand-in for the same user won the unique constraint
        session.rollback()
        raise HTTPException(status_code=400, detail="Assessment already submitted")
    session.refresh(submission)

    logger.info(
        "User %s submitted assessment %s: %d/%d",
        current_user.id,
        assessment.id,
        submission.score,
        submission.total_questions,
    )
    return SubmissionResult(**submission.model_dump())
