from sqlmodel import Session, select

from app.core.config import settings
from app.core.db import init_db
from app.core.roles import ALL_ROLES, student, teacher
from app.crud import get_user_by_email, get_user_permissions
from app.models import Permission, Role, RolePermission


class TestSeededRoles:
    """Roles and permissions created by init_db."""

    def test_all_roles_created(self, db: Session) -> None:
        names = set(db.exec(select(Role.name)).all())
        assert names == {role.name for role in ALL_ROLES}

    def test_student_permissions(self, db: Session) -> None:
        role = db.exec(select(Role).where(Role.name == student.name)).one()
        permissions = set(
            db.exec(
                select(Permission.name)
                .join(RolePermission)
                .where(RolePermission.role_id == role.id)
            ).all()
        )
        assert permissions == {"read_assessment", "take_assessment"}

    def test_teacher_cannot_take_assessments(self, db: Session) -> None:
        role = db.exec(select(Role).where(Role.name == teacher.name)).one()
        permissions = set(
            db.exec(
                select(Permission.name)
                .join(RolePermission)
                .where(RolePermission.role_id == role.id)
            ).all()
        )
        assert "take_assessment" not in permissions
        assert {"create_assessment", "read_submission", "grade_submission"} <= (
            permissions
        )

    def test_first_superuser(self, db: Session) -> None:
        user = get_user_by_email(session=db, email=settings.FIRST_SUPERUSER)
        assert user is not None
        permissions = get_user_permissions(session=db, user=user)
        assert "create_user" in permissions
        assert "take_assessment" not in permissions

    def test_init_db_is_idempotent(self, db: Session) -> None:
        role_count = len(db.exec(select(Role)).all())
        link_count = len(db.exec(select(RolePermission)).all())

        init_db(db)

        assert len(db.exec(select(Role)).all()) == role_count
        assert len(db.exec(select(RolePermission)).all()) == link_count
