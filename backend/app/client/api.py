"""
HTTP client for the taker side of the assessment API.

Requests are sent once; there is no retry policy. Transport failures and
error responses surface as AssessmentClientError carrying the server's
detail message when one is available.
"""

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import httpx

from app.models import AssessmentSummary, AssessmentTake, SubmissionResult
from app.models.submission import AnswerValue

logger = logging.getLogger(__name__)


class AssessmentClientError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        logger.error("Non-JSON error response: %s", response.text)
        return f"Server returned status {response.status_code}"
    detail = data.get("detail") if isinstance(data, dict) else None
    if not detail:
        return f"Server returned status {response.status_code}"
    return detail if isinstance(detail, str) else str(detail)


class AssessmentClient:
    """
    Talks to the assessment API on behalf of one signed-in taker.

    `base_url` includes the API prefix, e.g. "http://localhost:8000/api/v1".
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    async def login(
        cls,
        base_url: str,
        email: str,
        password: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "AssessmentClient":
        """Exchange credentials for an access token and return a ready client."""
        async with httpx.AsyncClient(
            base_url=base_url, timeout=timeout, transport=transport
        ) as client:
            try:
                response = await client.post(
                    "login/access-token",
                    data={"username": email, "password": password},
                )
            except httpx.HTTPError as exc:
                logger.error("Login request failed: %s", exc)
                raise AssessmentClientError(f"Login request failed: {exc}") from exc
        if response.is_error:
            raise AssessmentClientError(error_detail(response), response.status_code)
        token = response.json()["access_token"]
        return cls(base_url, token, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "AssessmentClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise AssessmentClientError(f"Request failed: {exc}") from exc

        if response.is_error:
            detail = error_detail(response)
            logger.error(
                "%s %s returned %s: %s", method, url, response.status_code, detail
            )
            raise AssessmentClientError(detail, response.status_code)
        return response.json()

    async def list_assessments(
        self,
        *,
        title: str | None = None,
        category: str | None = None,
        page: int = 1,
        size: int = 25,
    ) -> list[AssessmentSummary]:
        params: dict[str, Any] = {"page": page, "size": size}
        if title:
            params["title"] = title
        if category:
            params["category"] = category
        data = await self._request("GET", "assessment/", params=params)
        return [AssessmentSummary.model_validate(item) for item in data["items"]]

    async def get_assessment(self, assessment_id: int) -> AssessmentTake:
        data = await self._request("GET", f"assessment/{assessment_id}/take")
        return AssessmentTake.model_validate(data)

    async def submit(
        self, assessment_id: int, answers: Mapping[int, AnswerValue]
    ) -> SubmissionResult:
        payload = {"answers": {str(index): value for index, value in answers.items()}}
        data = await self._request(
            "POST", f"assessment/{assessment_id}/submit", json=payload
        )
        return SubmissionResult.model_validate(data)
