from datetime import timedelta

from sqlmodel import Session, select

from app.core.config import settings
from app.core.security import create_access_token, get_password_hash, verify_password
from app.models import Permission, Role, RolePermission
from app.models.user import User, UserCreate, UserPublic


def create_user(*, session: Session, user_create: UserCreate) -> User:
    db_obj = User.model_validate(
        user_create,
        update={"hashed_password": get_password_hash(user_create.password)},
    )
    session.add(db_obj)
    session.commit()
    session.refresh(db_obj)
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    db_obj.token = create_access_token(db_obj.id, access_token_expires)
    session.add(db_obj)
    session.commit()
    session.refresh(db_obj)
    return db_obj


def get_user_by_email(*, session: Session, email: str) -> User | None:
    return session.exec(select(User).where(User.email == email)).first()


def get_user_by_id(*, session: Session, id: int) -> User | None:
    return session.get(User, id)


def authenticate(*, session: Session, email: str, password: str) -> User | None:
    db_user = get_user_by_email(session=session, email=email)
    if not db_user:
        return None
    if not verify_password(password, db_user.hashed_password):
        return None
    return db_user


def get_user_permissions(*, session: Session, user: User) -> list[str]:
    statement = (
        select(Permission.name)
        .join(RolePermission)
        .where(RolePermission.permission_id == Permission.id)
        .where(RolePermission.role_id == user.role_id)
        .where(Permission.is_active)
    )
    return list(session.exec(statement).all())


def get_user_public(*, session: Session, db_user: User) -> UserPublic:
    role = session.get(Role, db_user.role_id)
    return UserPublic(
        **db_user.model_dump(exclude={"hashed_password", "token", "refresh_token"}),
        role_name=role.name if role else None,
        permissions=get_user_permissions(session=session, user=db_user),
    )
