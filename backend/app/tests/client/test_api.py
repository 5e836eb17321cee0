import httpx
import pytest
from sqlmodel import Session, select

from app.client import (
    AssessmentCatalog,
    AssessmentClient,
    AssessmentClientError,
    AssessmentSession,
    SessionStatus,
)
from app.core.config import settings
from app.models import Submission
from app.tests.utils.assessment import create_random_assessment
from app.tests.utils.user import create_random_user
from app.tests.utils.utils import random_lower_string

pytestmark = pytest.mark.anyio

BASE_URL = f"http://testserver{settings.API_V1_STR}"


async def login_student(
    db: Session, transport: httpx.AsyncBaseTransport
) -> AssessmentClient:
    password = random_lower_string()
    user = create_random_user(db, role="student", password=password)
    return await AssessmentClient.login(
        BASE_URL, user.email, password, transport=transport
    )


async def test_login_with_wrong_password(
    db: Session, asgi_transport: httpx.ASGITransport
) -> None:
    with pytest.raises(AssessmentClientError) as exc_info:
        await AssessmentClient.login(
            BASE_URL, settings.FIRST_SUPERUSER, "wrong-password", transport=asgi_transport
        )
    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Incorrect email or password"


async def test_take_and_submit(db: Session, asgi_transport: httpx.ASGITransport) -> None:
    assessment = create_random_assessment(
        db, correct_answers=(1, 0, 2), short_answers=("Paris",), title="Capitals"
    )
    create_random_assessment(db, is_active=False)

    async with await login_student(db, asgi_transport) as client:
        catalog = AssessmentCatalog(client)
        assert await catalog.refresh() is True
        assert [a.id for a in catalog.assessments] == [assessment.id]
        assert catalog.assessments[0].total_questions == 4

        session = await AssessmentSession.open(client, assessment.id)
        async with session:
            session.answer(1)
            session.next()
            session.answer(0)
            session.next()
            session.answer(1)
            session.go_to(3)
            session.answer(" PARIS ")
            result = await session.submit()

    assert session.status is SessionStatus.SUBMITTED
    assert result.score == 3
    assert result.total_questions == 4
    assert result.percentage == 75
    assert result.band.value == "yellow"

    submission = db.exec(
        select(Submission).where(Submission.assessment_id == assessment.id)
    ).one()
    assert submission.score == 3
    assert submission.answers == {"0": 1, "1": 0, "2": 1, "3": " PARIS "}


async def test_expired_session_submits_once(
    db: Session, asgi_transport: httpx.ASGITransport
) -> None:
    assessment = create_random_assessment(db, correct_answers=(1, 0, 2), duration=1)

    async with await login_student(db, asgi_transport) as client:
        session = await AssessmentSession.open(client, assessment.id)
        session.answer(1)
        for _ in range(60):
            await session.tick()
        await session.close()

        assert session.status is SessionStatus.EXPIRED
        assert session.result is not None
        assert session.result.score == 1

        with pytest.raises(AssessmentClientError) as exc_info:
            await client.get_assessment(assessment.id)
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Assessment already submitted"

    submissions = db.exec(
        select(Submission).where(Submission.assessment_id == assessment.id)
    ).all()
    assert len(submissions) == 1


async def test_server_rejects_second_submission(
    db: Session, asgi_transport: httpx.ASGITransport
) -> None:
    assessment = create_random_assessment(db)

    async with await login_student(db, asgi_transport) as client:
        first = await AssessmentSession.open(client, assessment.id)
        second = await AssessmentSession.open(client, assessment.id)
        await first.submit()

        with pytest.raises(AssessmentClientError) as exc_info:
            await second.submit()

    assert exc_info.value.message == "Assessment already submitted"
    assert second.is_active


async def test_inactive_assessment_not_found(
    db: Session, asgi_transport: httpx.ASGITransport
) -> None:
    assessment = create_random_assessment(db, is_active=False)

    async with await login_student(db, asgi_transport) as client:
        with pytest.raises(AssessmentClientError) as exc_info:
            await AssessmentSession.open(client, assessment.id)

    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Assessment not found or not active"


async def test_catalog_keeps_list_when_refresh_fails() -> None:
    responses = iter(
        [
            httpx.Response(
                200,
                json={
                    "items": [
                        {
                            "id": 1,
                            "title": "Quiz",
                            "description": None,
                            "category": "quiz",
                            "duration": 10,
                            "is_active": True,
                            "created_date": "2025-01-01T10:00:00",
                            "modified_date": "2025-01-01T10:00:00",
                            "total_questions": 3,
                        }
                    ],
                    "total": 1,
                    "page": 1,
                    "size": 25,
                    "pages": 1,
                },
            ),
            httpx.Response(503, text="Service Unavailable"),
        ]
    )

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    async with AssessmentClient(
        BASE_URL, "token", transport=httpx.MockTransport(handler)
    ) as client:
        catalog = AssessmentCatalog(client)
        assert await catalog.refresh() is True
        assert catalog.error is None

        assert await catalog.refresh() is False
        assert [a.title for a in catalog.assessments] == ["Quiz"]
        assert catalog.error is not None
        assert catalog.error.status_code == 503
        assert catalog.error.message == "Server returned status 503"


async def test_transport_error_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    async with AssessmentClient(
        BASE_URL, "token", transport=httpx.MockTransport(handler)
    ) as client:
        with pytest.raises(AssessmentClientError) as exc_info:
            await client.submit(1, {0: 1})

    assert exc_info.value.status_code is None
    assert "Connection refused" in exc_info.value.message


async def test_list_assessments_query() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200, json={"items": [], "total": 0, "page": 1, "size": 10, "pages": 0}
        )

    async with AssessmentClient(
        BASE_URL, "secret", transport=httpx.MockTransport(handler)
    ) as client:
        assert await client.list_assessments(category="math", size=10) == []

    request = seen[0]
    assert request.url.path == f"{settings.API_V1_STR}/assessment/"
    assert request.url.params["category"] == "math"
    assert request.url.params["size"] == "10"
    assert "title" not in request.url.params
    assert request.headers["Authorization"] == "Bearer secret"
