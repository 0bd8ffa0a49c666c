"""Registration, login and profile edits."""

from __future__ import annotations

import logging
from uuid import uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core import create_access_token, hash_password, needs_rehash
from db.errors import is_unique_violation, unique_violation_field
from models import User

from .auth import (
    normalize_email,
    normalize_phone,
    registration_conflict_field,
    resolve_login_user,
)
from .errors import DuplicateConstraint, InvalidOperation, Unauthorized
from .media import discard_object, prepare_image, store_image

logger = logging.getLogger(__name__)

UNIQUE_USER_FIELDS = ("username", "email", "phone")
MIN_NAME_LENGTH = 2
MIN_USERNAME_LENGTH = 3
MAX_USERNAME_LENGTH = 30
MAX_BIO_LENGTH = 300


def issue_access_token(user: User) -> str:
    return create_access_token(user.id)


def validate_username(username: str) -> str:
    normalized = username.strip()
    if not MIN_USERNAME_LENGTH <= len(normalized) <= MAX_USERNAME_LENGTH:
        raise InvalidOperation(
            f"Username must be {MIN_USERNAME_LENGTH}-{MAX_USERNAME_LENGTH} characters"
        )
    if "@" in normalized or any(char.isspace() for char in normalized):
        raise InvalidOperation("Username cannot contain '@' or spaces")
    return normalized


def _translate_unique_violation(exc: IntegrityError) -> DuplicateConstraint:
    return DuplicateConstraint(unique_violation_field(exc, UNIQUE_USER_FIELDS))


async def register_user(
    session: AsyncSession,
    *,
    name: str,
    username: str,
    email: str,
    password: str,
    phone: str | None = None,
) -> User:
    username = validate_username(username)
    normalized_email = normalize_email(email)
    normalized_phone = normalize_phone(phone)

    conflict = await registration_conflict_field(
        session,
        username=username,
        normalized_email=normalized_email,
        phone=normalized_phone,
    )
    if conflict is not None:
        raise DuplicateConstraint(conflict)

    user = User(
        name=name.strip(),
        username=username,
        email=normalized_email,
        phone=normalized_phone,
        password_hash=hash_password(password),
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            raise _translate_unique_violation(exc) from exc
        raise
    await session.refresh(user)
    logger.info("User registered", extra={"user_id": user.id})
    return user


async def authenticate_user(
    session: AsyncSession,
    *,
    email: str,
    password: str,
) -> User:
    user = await resolve_login_user(session, email=email, password=password)
    if user is None:
        raise Unauthorized("Invalid credentials")

    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        session.add(user)
        await session.commit()
        await session.refresh(user)
    return user


async def update_profile(
    session: AsyncSession,
    *,
    user: User,
    name: str | None = None,
    username: str | None = None,
    phone: str | None = None,
    bio: str | None = None,
    avatar_data: bytes | None = None,
) -> User:
    """Apply the provided fields; ``None`` leaves a field unchanged.

    An empty ``phone`` or ``bio`` clears it. A new avatar replaces the old
    object, which is removed after the row commits.
    """
    if name is not None:
        name = name.strip()
        if len(name) < MIN_NAME_LENGTH:
            raise InvalidOperation(f"Name must be at least {MIN_NAME_LENGTH} characters")
        user.name = name

    if bio is not None:
        bio = bio.strip()
        if len(bio) > MAX_BIO_LENGTH:
            raise InvalidOperation(f"Bio must be at most {MAX_BIO_LENGTH} characters")
        user.bio = bio or None

    new_username = validate_username(username) if username is not None else None
    new_phone = normalize_phone(phone) if phone is not None else None
    conflict = await registration_conflict_field(
        session,
        username=new_username,
        phone=new_phone,
        exclude_user_id=user.id,
    )
    if conflict is not None:
        raise DuplicateConstraint(conflict)
    if new_username is not None:
        user.username = new_username
    if phone is not None:
        user.phone = new_phone

    previous_avatar_key = user.avatar_key
    new_avatar_key: str | None = None
    if avatar_data is not None:
        processed_bytes, content_type = await prepare_image(avatar_data)
        new_avatar_key = f"avatars/{user.id}/{uuid4().hex}.jpg"
        user.avatar_url = await store_image(new_avatar_key, processed_bytes, content_type)
        user.avatar_key = new_avatar_key

    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        await discard_object(new_avatar_key)
        if is_unique_violation(exc):
            raise _translate_unique_violation(exc) from exc
        raise
    await session.refresh(user)

    if new_avatar_key is not None and previous_avatar_key != new_avatar_key:
        await discard_object(previous_avatar_key)
    return user


__all__ = [
    "MAX_BIO_LENGTH",
    "authenticate_user",
    "issue_access_token",
    "register_user",
    "update_profile",
    "validate_username",
]
