from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from pydantic import model_validator
from sqlmodel import JSON, Field, Relationship, SQLModel, UniqueConstraint

from app.core.timezone import get_timezone_aware_now

if TYPE_CHECKING:
    from app.models import Submission, User


class QuestionType(str, Enum):
    """Types of questions an assessment can hold"""

    multiple_choice = "multiple-choice"
    short_answer = "short-answer"


# Option index for multiple-choice, expected text for short-answer
CorrectAnswerType = int | str | None


class QuestionBase(SQLModel):
    """Base model with common fields for questions"""

    prompt: str = Field(nullable=False, description="The question shown to the taker")
    question_type: QuestionType = Field(
        nullable=False,
        description="Type of question (multiple-choice or short-answer)",
    )
    options: list[str] | None = Field(
        sa_type=JSON,
        default=None,
        description="Answer options, only for multiple-choice questions",
    )
    correct_answer: CorrectAnswerType = Field(
        sa_type=JSON,
        default=None,
        description="Index of the correct option, or the expected short answer",
    )
    points: int = Field(default=1, ge=0, description="Weight of the question")

    @model_validator(mode="after")
    def validate_options_and_answer(self) -> "QuestionBase":
        if self.question_type == QuestionType.multiple_choice:
            if not self.options:
                raise ValueError("Multiple-choice questions need at least one option.")
            if self.correct_answer is not None:
                if isinstance(self.correct_answer, bool) or not isinstance(
                    self.correct_answer, int
                ):
                    raise ValueError(
                        "Correct answer of a multiple-choice question must be an option index."
                    )
                if not 0 <= self.correct_answer < len(self.options):
                    raise ValueError(
                        f"Correct answer index {self.correct_answer} does not match any option."
                    )
        else:
            if self.options:
                raise ValueError("Short-answer questions cannot have options.")
            if self.correct_answer is not None and not isinstance(
                self.correct_answer, str
            ):
                raise ValueError(
                    "Correct answer of a short-answer question must be text."
                )
        return self


class AssessmentQuestion(QuestionBase, table=True):
    __tablename__ = "assessment_question"
    __table_args__ = (UniqueConstraint("assessment_id", "position"),)
    id: int | None = Field(default=None, primary_key=True)
    assessment_id: int = Field(foreign_key="assessment.id", ondelete="CASCADE")
    position: int = Field(
        ge=0,
        nullable=False,
        description="0-based index of the question; answers are keyed by it",
    )
    created_date: datetime | None = Field(default_factory=get_timezone_aware_now)
    assessment: "Assessment" = Relationship(back_populates="questions")


class QuestionCreate(QuestionBase):
    pass


class QuestionPublic(QuestionBase):
    id: int
    position: int


class QuestionTakerPublic(SQLModel):
    """Question as shown to the taker, without the correct answer"""

    id: int
    position: int
    prompt: str
    question_type: QuestionType
    options: list[str] | None = None
    points: int


class AssessmentBase(SQLModel):
    title: str = Field(
        index=True,
        min_length=1,
        title="Assessment Title",
        description="Title of the assessment shown to the taker.",
    )
    description: str | None = Field(
        default=None,
        title="Assessment Description",
        description="Description of the assessment shown to the taker.",
    )
    category: str | None = Field(
        default=None,
        index=True,
        title="Category",
        description="Free-form grouping such as quiz, assignment or topic.",
    )
    duration: int = Field(
        ge=1,
        title="Duration in Minutes",
        description="Time allowed to complete the assessment, in minutes.",
    )
    is_active: bool = Field(default=True)


class Assessment(AssessmentBase, table=True):
    id: int | None = Field(default=None, primary_key=True)
    created_by_id: int = Field(
        foreign_key="user.id",
        title="User ID",
        description="ID of the user who authored the assessment.",
    )
    created_date: datetime | None = Field(default_factory=get_timezone_aware_now)
    modified_date: datetime | None = Field(
        default_factory=get_timezone_aware_now,
        sa_column_kwargs={"onupdate": get_timezone_aware_now},
    )
    is_deleted: bool = Field(default=False, nullable=False)
    created_by: Optional["User"] = Relationship(back_populates="assessments")
    questions: list[AssessmentQuestion] = Relationship(
        back_populates="assessment",
        sa_relationship_kwargs={
            "order_by": "AssessmentQuestion.position",
            "cascade": "all, delete-orphan",
        },
    )
    submissions: list["Submission"] = Relationship(back_populates="assessment")


class AssessmentCreate(AssessmentBase):
    questions: list[QuestionCreate] = []


class AssessmentUpdate(AssessmentBase):
    # None keeps the stored questions, a list replaces them
    questions: list[QuestionCreate] | None = None


class AssessmentPublic(AssessmentBase):
    id: int
    created_by_id: int
    created_date: datetime
    modified_date: datetime
    is_deleted: bool
    questions: list[QuestionPublic]
    total_questions: int


class AssessmentSummary(AssessmentBase):
    """Catalog entry, without questions"""

    id: int
    created_date: datetime
    modified_date: datetime
    total_questions: int


class AssessmentTake(SQLModel):
    """Assessment definition for the taker, questions ordered by position"""

    id: int
    title: str
    description: str | None
    category: str | None
    duration: int
    questions: list[QuestionTakerPublic]
    total_questions: int
