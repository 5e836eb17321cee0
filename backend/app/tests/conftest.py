from collections.abc import Generator

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.api.deps import get_db
from app.core.db import init_db
from app.main import app
from app.tests.utils.user import get_user_token


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Fresh in-memory database per test, seeded like a new deployment.

    StaticPool keeps the single connection alive so the tables survive
    across the threads the TestClient runs endpoints in.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        init_db(session)
        yield session
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def override_db(db: Session) -> Generator[Session, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield db
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(override_db: Session) -> Generator[TestClient, None, None]:
    """Test client that uses the per-test session."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def asgi_transport(override_db: Session) -> httpx.ASGITransport:
    """Transport for the async taker client, served by the app in-process."""
    return httpx.ASGITransport(app=app)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(scope="function")
def get_user_superadmin_token(db: Session) -> dict[str, str]:
    return get_user_token(db=db, role="super_admin")


@pytest.fixture(scope="function")
def get_user_teacher_token(db: Session) -> dict[str, str]:
    return get_user_token(db=db, role="teacher")


@pytest.fixture(scope="function")
def get_user_student_token(db: Session) -> dict[str, str]:
    return get_user_token(db=db, role="student")
