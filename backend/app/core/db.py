import logging

from sqlalchemy import Engine
from sqlmodel import Session, SQLModel, create_engine, select

from app import crud
from app.core.config import settings
from app.core.permissions import init_permissions
from app.core.roles import init_roles, super_admin
from app.models import Role, User, UserCreate

logger = logging.getLogger(__name__)

connect_args = (
    {"check_same_thread": False}
    if settings.SQLALCHEMY_DATABASE_URI.startswith("sqlite")
    else {}
)
engine = create_engine(settings.SQLALCHEMY_DATABASE_URI, connect_args=connect_args)


# make sure all SQLModel models are imported (app.models) before initializing DB
# otherwise, SQLModel might fail to initialize relationships properly


def create_db_and_tables(bind: Engine | None = None) -> None:
    SQLModel.metadata.create_all(bind or engine)


def init_db(session: Session) -> None:
    init_permissions(session)
    init_roles(session)

    super_admin_role = session.exec(
        select(Role.id).where(Role.name == super_admin.name)
    ).first()
    if super_admin_role is None:
        raise RuntimeError("Super admin role was not created")

    user = session.exec(
        select(User).where(User.email == settings.FIRST_SUPERUSER)
    ).first()
    if not user:
        user_in = UserCreate(
            full_name=settings.FIRST_SUPERUSER_FULLNAME,
            email=settings.FIRST_SUPERUSER,
            password=settings.FIRST_SUPERUSER_PASSWORD,
            role_id=super_admin_role,
        )
        crud.create_user(session=session, user_create=user_in)
        logger.info("Created first superuser %s", settings.FIRST_SUPERUSER)
