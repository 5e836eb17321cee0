from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm

from app import crud
from app.api.deps import CurrentUser, SessionDep
from app.core import security
from app.core.config import settings
from app.models import Message, RefreshTokenRequest, Token, User

router = APIRouter(tags=["login"])


def issue_tokens(session: SessionDep, user: User) -> Token:
    access_token = security.create_access_token(
        user.id, expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    refresh_token = security.create_refresh_token(
        user.id, expires_delta=timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES)
    )

    user.token = access_token
    user.refresh_token = refresh_token
    session.add(user)
    session.commit()

    return Token(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.post("/login/access-token")
def login_access_token(
    session: SessionDep, form_data: Annotated[OAuth2PasswordRequestForm, Depends()]
) -> Token:
    """
    OAuth2 compatible token login, get an access token and refresh token for future requests
    """
    user = crud.authenticate(
        session=session, email=form_data.username, password=form_data.password
    )
    if not user:
        raise HTTPException(status_code=400, detail="Incorrect email or password")
    elif not user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")
    return issue_tokens(session, user)


@router.post("/login/refresh-token")
def refresh_access_token(session: SessionDep, request: RefreshTokenRequest) -> Token:
    """
    Get a new access token using refresh token
    """
    user_id = security.verify_token(
        request.refresh_token, token_type=security.REFRESH_TOKEN
    )
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    user = crud.get_user_by_id(session=session, id=int(user_id))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    elif not user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")

    # Only the most recently issued refresh token is accepted
    if user.refresh_token != request.refresh_token:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    return issue_tokens(session, user)


@router.post("/login/logout")
def logout(session: SessionDep, current_user: CurrentUser) -> Message:
    """
    Logout user by revoking token and refresh token
    """
    current_user.token = None
    current_user.refresh_token = None
    session.add(current_user)
    session.commit()
    return Message(message="Successfully logged out")
