"""Authentication domain services."""

from .cookies import (
    ACCESS_COOKIE,
    clear_access_cookie,
    set_access_cookie,
)
from .identity_resolution import (
    normalize_email,
    normalize_phone,
    registration_conflict_field,
    resolve_login_user,
)

__all__ = [
    "ACCESS_COOKIE",
    "clear_access_cookie",
    "set_access_cookie",
    "normalize_email",
    "normalize_phone",
    "registration_conflict_field",
    "resolve_login_user",
]
