from .assessment import (
    Assessment,
    AssessmentCreate,
    AssessmentPublic,
    AssessmentQuestion,
    AssessmentSummary,
    AssessmentTake,
    AssessmentUpdate,
    QuestionCreate,
    QuestionPublic,
    QuestionTakerPublic,
    QuestionType,
)
from .auth import RefreshTokenRequest, Token
from .role import (
    Permission,
    PermissionCreate,
    Role,
    RoleCreate,
    RolePermission,
)
from .submission import (
    AnswerMap,
    FeedbackUpdate,
    Submission,
    SubmissionPublic,
    SubmissionRequest,
    SubmissionResult,
)
from .user import User, UserCreate, UserPublic
from .utils import Message

__all__ = [
    "Assessment",
    "AssessmentCreate",
    "AssessmentPublic",
    "AssessmentQuestion",
    "AssessmentSummary",
    "AssessmentTake",
    "AssessmentUpdate",
    "QuestionCreate",
    "QuestionPublic",
    "QuestionTakerPublic",
    "QuestionType",
    "RefreshTokenRequest",
    "Token",
    "Permission",
    "PermissionCreate",
    "Role",
    "RoleCreate",
    "RolePermission",
    "AnswerMap",
    "FeedbackUpdate",
    "Submission",
    "SubmissionPublic",
    "SubmissionRequest",
    "SubmissionResult",
    "User",
    "UserCreate",
    "UserPublic",
    "Message",
]
