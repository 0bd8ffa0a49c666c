"""Denormalized post counters.

``like_count`` moves by SQL-side arithmetic in the same transaction as the
like edge. ``comment_count`` is recomputed from ``count(*)`` after every
comment mutation so drift heals itself on the next write.
"""

from __future__ import annotations

import logging
from typing import Any, cast

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import Comment, Post

logger = logging.getLogger(__name__)


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


async def increment_like_count(session: AsyncSession, post_id: int) -> None:
    like_count = cast(Any, Post.like_count)
    await session.execute(
        update(Post)
        .where(_eq(Post.id, post_id))
        .values(like_count=like_count + 1)
        .execution_options(synchronize_session=False)
    )


async def decrement_like_count(session: AsyncSession, post_id: int) -> None:
    like_count = cast(Any, Post.like_count)
    await session.execute(
        update(Post)
        .where(_eq(Post.id, post_id))
        .values(like_count=case((like_count > 0, like_count - 1), else_=0))
        .execution_options(synchronize_session=False)
    )


async def read_like_count(session: AsyncSession, post_id: int) -> int:
    result = await session.execute(
        select(cast(Any, Post.like_count)).where(_eq(Post.id, post_id))
    )
    value = result.scalar_one_or_none()
    return int(value or 0)


async def sync_comment_count(session: AsyncSession, post_id: int) -> bool:
    """Recompute ``comment_count`` for ``post_id`` inside a savepoint.

    A failure is rolled back to the savepoint and logged; the caller's
    transaction stays usable. Returns whether the counter was written.
    """
    comment_total = (
        select(func.count())
        .select_from(Comment)
        .where(_eq(Comment.post_id, post_id))
        .scalar_subquery()
    )
    try:
        async with session.begin_nested():
            await session.execute(
                update(Post)
                .where(_eq(Post.id, post_id))
                .values(comment_count=comment_total)
                .execution_options(synchronize_session=False)
            )
    except SQLAlchemyError:
        logger.warning(
            "Failed to sync comment count",
            extra={"post_id": post_id},
            exc_info=True,
        )
        return False
    return True


__all__ = [
    "increment_like_count",
    "decrement_like_count",
    "read_like_count",
    "sync_comment_count",
]
