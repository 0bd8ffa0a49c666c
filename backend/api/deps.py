"""Request-scoped FastAPI dependencies: database session and viewer identity."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any, cast

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from core import ACCESS_TOKEN_TYPE, decode_token
from db.session import get_session
from models import User
from services.auth import ACCESS_COOKIE
from services.errors import Unauthorized
from services.viewer import ANONYMOUS, Identified, Viewer

bearer_scheme = HTTPBearer(auto_error=False)


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


async def get_db() -> AsyncIterator[AsyncSession]:
    async for session in get_session():
        yield session


def _request_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
) -> str | None:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(ACCESS_COOKIE) or None


async def _user_from_token(session: AsyncSession, token: str) -> User:
    try:
        payload = decode_token(token)
    except ValueError as exc:
        raise Unauthorized("Invalid or expired token") from exc

    subject = payload.get("sub")
    if payload.get("type") != ACCESS_TOKEN_TYPE or not isinstance(subject, str):
        raise Unauthorized("Invalid or expired token")

    result = await session.execute(select(User).where(_eq(User.id, subject)))
    user = result.scalar_one_or_none()
    if user is None:
        raise Unauthorized("Invalid or expired token")
    return user


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the authenticated user or fail with 401."""
    token = _request_token(request, credentials)
    if token is None:
        raise Unauthorized("Authentication required")
    return await _user_from_token(session, token)


async def get_optional_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db),
) -> User | None:
    """Like ``get_current_user`` but a missing or bad token means anonymous."""
    token = _request_token(request, credentials)
    if token is None:
        return None
    try:
        return await _user_from_token(session, token)
    except Unauthorized:
        return None


async def get_viewer(user: User | None = Depends(get_optional_user)) -> Viewer:
    if user is None:
        return ANONYMOUS
    return Identified(user.id)
