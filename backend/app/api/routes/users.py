from fastapi import APIRouter, Depends, HTTPException

from app import crud
from app.api.deps import CurrentUser, SessionDep, permission_dependency
from app.models import Role, UserCreate, UserPublic

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "/",
    response_model=UserPublic,
    dependencies=[Depends(permission_dependency("create_user"))],
)
def create_user(session: SessionDep, user_in: UserCreate) -> UserPublic:
    """
    Create new user.
    """
    if crud.get_user_by_email(session=session, email=user_in.email):
        raise HTTPException(
            status_code=400,
            detail="The user with this email already exists in the system.",
        )
    if not session.get(Role, user_in.role_id):
        raise HTTPException(status_code=404, detail="Invalid Role")

    user = crud.create_user(session=session, user_create=user_in)
    return crud.get_user_public(session=session, db_user=user)


@router.get("/me", response_model=UserPublic)
def read_user_me(session: SessionDep, current_user: CurrentUser) -> UserPublic:
    """
    Get current user.
    """
    return crud.get_user_public(session=session, db_user=current_user)
