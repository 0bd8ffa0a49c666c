"""Identity normalization, registration conflicts and login-user resolution."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from core import verify_password
from models import User


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def _ne(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column != value)


def normalize_email(value: str) -> str:
    return value.strip().lower()


def normalize_phone(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None


async def _value_taken(
    session: AsyncSession,
    condition: ColumnElement[bool],
    *,
    exclude_user_id: str | None,
) -> bool:
    query = select(cast(Any, User.id)).where(condition)
    if exclude_user_id is not None:
        query = query.where(_ne(User.id, exclude_user_id))
    result = await session.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


async def registration_conflict_field(
    session: AsyncSession,
    *,
    username: str | None = None,
    normalized_email: str | None = None,
    phone: str | None = None,
    exclude_user_id: str | None = None,
) -> str | None:
    """Return the first of username/email/phone already owned by someone else."""
    if username is not None and await _value_taken(
        session, _eq(User.username, username), exclude_user_id=exclude_user_id
    ):
        return "username"
    if normalized_email is not None and await _value_taken(
        session,
        _eq(func.lower(cast(Any, User.email)), normalized_email),
        exclude_user_id=exclude_user_id,
    ):
        return "email"
    if phone is not None and await _value_taken(
        session, _eq(User.phone, phone), exclude_user_id=exclude_user_id
    ):
        return "phone"
    return None


async def resolve_login_user(
    session: AsyncSession,
    *,
    email: str,
    password: str,
) -> User | None:
    lowered_email_column = cast(Any, func.lower(cast(Any, User.email)))
    result = await session.execute(
        select(User).where(_eq(lowered_email_column, normalize_email(email))).limit(1)
    )
    user = result.scalar_one_or_none()
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user
