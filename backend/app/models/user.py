from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import EmailStr
from sqlmodel import Field, Relationship, SQLModel

from app.core.timezone import get_timezone_aware_now

if TYPE_CHECKING:
    from app.models import Assessment, Role, Submission


# Shared properties
class UserBase(SQLModel):
    full_name: str = Field(
        max_length=255,
        title="Full Name of the User",
        description="Enter Full Name of the User",
    )
    email: EmailStr = Field(
        unique=True,
        index=True,
        max_length=255,
        title="Email of the User",
        description="Enter Email Address",
    )
    role_id: int = Field(foreign_key="role.id")
    is_active: bool = Field(default=True)


# Properties to receive via API on creation
class UserCreate(UserBase):
    password: str = Field(
        min_length=8,
        max_length=40,
        nullable=False,
        title="Enter Password",
        description="Create password of minimum 8 characters and maximum 40 characters",
    )


class User(UserBase, table=True):
    id: int | None = Field(default=None, primary_key=True)
    created_date: datetime | None = Field(default_factory=get_timezone_aware_now)
    modified_date: datetime | None = Field(
        default_factory=get_timezone_aware_now,
        sa_column_kwargs={"onupdate": get_timezone_aware_now},
    )
    hashed_password: str
    token: str | None = Field(default=None)
    refresh_token: str | None = Field(default=None)
    role: "Role" = Relationship(back_populates="users")
    assessments: list["Assessment"] = Relationship(back_populates="created_by")
    submissions: list["Submission"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"foreign_keys": "Submission.user_id"},
    )


# Properties to return via API, id is always required
class UserPublic(UserBase):
    id: int
    created_date: datetime
    modified_date: datetime
    role_name: str | None = None
    permissions: list[str] = []
