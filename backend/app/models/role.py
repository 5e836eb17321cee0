from typing import TYPE_CHECKING

from sqlmodel import Field, Relationship, SQLModel, UniqueConstraint

if TYPE_CHECKING:
    from app.models import User


class RolePermission(SQLModel, table=True):
    __tablename__ = "role_permission"
    id: int | None = Field(default=None, primary_key=True)
    __table_args__ = (UniqueConstraint("permission_id", "role_id"),)
    permission_id: int = Field(foreign_key="permission.id", ondelete="CASCADE")
    role_id: int = Field(foreign_key="role.id", ondelete="CASCADE")


class PermissionBase(SQLModel):
    name: str = Field(min_length=1, max_length=255, unique=True)
    description: str | None = Field(default=None, max_length=255)
    is_active: bool = Field(default=True)


class PermissionCreate(PermissionBase):
    pass


class Permission(PermissionBase, table=True):
    id: int | None = Field(default=None, primary_key=True)
    roles: list["Role"] | None = Relationship(
        back_populates="permissions", link_model=RolePermission
    )


class RoleBase(SQLModel):
    name: str = Field(min_length=1, max_length=255, nullable=False, unique=True)
    description: str | None = Field(default=None, max_length=255, nullable=True)
    label: str = Field(nullable=False)


class RoleCreate(RoleBase):
    pass


class Role(RoleBase, table=True):
    id: int | None = Field(default=None, primary_key=True)
    is_active: bool = Field(default=True, nullable=False)
    users: list["User"] = Relationship(back_populates="role")
    permissions: list[Permission] | None = Relationship(
        back_populates="roles", link_model=RolePermission
    )
