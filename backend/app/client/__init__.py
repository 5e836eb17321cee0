from .api import AssessmentClient, AssessmentClientError
from .catalog import AssessmentCatalog
from .session import (
    AssessmentSession,
    InvalidAnswerError,
    SessionClosedError,
    SessionStatus,
)

__all__ = [
    "AssessmentClient",
    "AssessmentClientError",
    "AssessmentCatalog",
    "AssessmentSession",
    "InvalidAnswerError",
    "SessionClosedError",
    "SessionStatus",
]
