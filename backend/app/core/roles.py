from sqlmodel import Session, select

from app.core.permissions import permission_data
from app.models import Permission, Role, RoleCreate, RolePermission

super_admin = RoleCreate(
    name="super_admin",
    label="Super Admin",
    description="A super-admin has overall access to the system",
)

teacher = RoleCreate(
    name="teacher",
    label="Teacher",
    description="Authors assessments and grades submissions",
)

student = RoleCreate(
    name="student",
    label="Student",
    description="Takes assessments",
)

ALL_ROLES = [super_admin, teacher, student]


def get_role_permissions(role: RoleCreate, session: Session) -> list[int]:
    """
    IDs of the stored permissions that permission_data.json grants to the role.
    """
    permission_list = []
    for permission in permission_data:
        if permission.get(role.name):
            current_permission = session.exec(
                select(Permission.id).where(Permission.name == permission["name"])
            ).first()
            if current_permission is not None:
                permission_list.append(current_permission)
    return permission_list


def create_role(session: Session, role_create: RoleCreate, permissions: list[int]) -> Role:
    current_role = session.exec(
        select(Role).where(Role.name == role_create.name)
    ).first()
    if current_role:
        return current_role

    current_role = Role.model_validate(role_create)
    session.add(current_role)
    session.commit()
    session.refresh(current_role)
    for permission_id in permissions:
        session.add(
            RolePermission(role_id=current_role.id, permission_id=permission_id)
        )
    session.commit()
    return current_role


def init_roles(session: Session) -> None:
    """
    Create the built-in roles with the permissions granted in permission_data.json.
    """
    for role in ALL_ROLES:
        create_role(session, role, get_role_permissions(role, session))
