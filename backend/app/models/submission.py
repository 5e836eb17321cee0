from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, StrictInt, StrictStr, computed_field
from sqlmodel import JSON, Field, Relationship, SQLModel, UniqueConstraint

from app.core import grading
from app.core.grading import ScoreBand
from app.core.timezone import get_timezone_aware_now

if TYPE_CHECKING:
    from app.models import Assessment, User


# Submitted value per question index: option index or free text.
# JSON true and 1.0 are rejected, never coerced to an index.
AnswerValue = StrictInt | StrictStr | None
AnswerMap = dict[int, AnswerValue]


class SubmissionBase(SQLModel):
    user_id: int = Field(foreign_key="user.id", ondelete="CASCADE")
    assessment_id: int = Field(foreign_key="assessment.id", ondelete="CASCADE")
    answers: dict[str, Any] = Field(
        sa_type=JSON,
        default_factory=dict,
        description="Submitted answers keyed by question index",
    )
    score: int = Field(ge=0, description="Number of correctly answered questions")
    total_questions: int = Field(ge=0)
    points_obtained: float = Field(default=0.0)
    points_maximum: float = Field(default=0.0)
    submitted_at: datetime = Field(default_factory=get_timezone_aware_now)
    manual_score: int | None = Field(
        default=None,
        ge=0,
        description="Grader override of the automatic score, used for display",
    )
    feedback: str | None = Field(default=None)
    feedback_provided_by_id: int | None = Field(default=None, foreign_key="user.id")
    feedback_provided_at: datetime | None = Field(default=None)


class Submission(SubmissionBase, table=True):
    # One hand-in per taker and assessment
    __table_args__ = (UniqueConstraint("user_id", "assessment_id"),)
    id: int | None = Field(default=None, primary_key=True)
    user: "User" = Relationship(
        back_populates="submissions",
        sa_relationship_kwargs={"foreign_keys": "Submission.user_id"},
    )
    assessment: "Assessment" = Relationship(back_populates="submissions")


class SubmissionRequest(SQLModel):
    """Answers keyed by question index, as sent by the taker"""

    answers: AnswerMap = {}


class ScoredView(BaseModel):
    score: int
    total_questions: int
    manual_score: int | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def effective_score(self) -> int:
        return grading.effective_score(self.score, self.manual_score)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def percentage(self) -> int:
        return grading.percentage(self.effective_score, self.total_questions)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def band(self) -> ScoreBand:
        return grading.score_band(
            grading.ratio(self.effective_score, self.total_questions)
        )


class SubmissionResult(ScoredView):
    """Returned to the taker right after hand-in"""

    id: int
    assessment_id: int
    points_obtained: float
    points_maximum: float
    submitted_at: datetime


class SubmissionPublic(ScoredView):
    id: int
    user_id: int
    assessment_id: int
    answers: AnswerMap
    points_obtained: float
    points_maximum: float
    submitted_at: datetime
    feedback: str | None = None
    feedback_provided_by_id: int | None = None
    feedback_provided_at: datetime | None = None
    student_name: str | None = None
    student_email: str | None = None
    assessment_title: str | None = None
    feedback_provided_by_name: str | None = None


class FeedbackUpdate(SQLModel):
    feedback: str | None = None
    manual_score: int | None = Field(
        default=None,
        ge=0,
        description="Leave empty to keep using the automatic score",
    )
