import logging

from app.client.api import AssessmentClient, AssessmentClientError
from app.models import AssessmentSummary

logger = logging.getLogger(__name__)


class AssessmentCatalog:
    """
    The taker's list of available assessments.

    A failed refresh records the error and keeps the previously loaded list.
    """

    def __init__(self, client: AssessmentClient) -> None:
        self.client = client
        self.assessments: list[AssessmentSummary] = []
        self.error: AssessmentClientError | None = None

    async def refresh(
        self, *, title: str | None = None, category: str | None = None
    ) -> bool:
        try:
            assessments = await self.client.list_assessments(
                title=title, category=category
            )
        except AssessmentClientError as exc:
            logger.warning("Failed to load assessments: %s", exc.message)
            self.error = exc
            return False
        self.assessments = assessments
        self.error = None
        return True
