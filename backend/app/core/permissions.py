import json
from pathlib import Path

from sqlmodel import Session, select

from app.models import Permission, PermissionCreate

PERMISSION_DATA_PATH = Path(__file__).with_name("permission_data.json")

with PERMISSION_DATA_PATH.open() as file:
    permission_data = json.load(file)

permission_create_list = [
    PermissionCreate(name=permission["name"], description=permission["description"])
    for permission in permission_data
]


def init_permissions(session: Session) -> None:
    """
    Create the permissions listed in permission_data.json that are not stored yet.
    """
    for permission in permission_create_list:
        current_permission = session.exec(
            select(Permission).where(Permission.name == permission.name)
        ).first()

        if not current_permission:
            session.add(Permission.model_validate(permission))
    session.commit()
