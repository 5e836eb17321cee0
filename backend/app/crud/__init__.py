from .user import (
    authenticate,
    create_user,
    get_user_by_email,
    get_user_by_id,
    get_user_permissions,
    get_user_public,
)

__all__ = [
    "create_user",
    "get_user_by_email",
    "get_user_by_id",
    "authenticate",
    "get_user_permissions",
    "get_user_public",
]
