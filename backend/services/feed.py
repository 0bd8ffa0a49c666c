"""Home feed: the viewer's own posts plus everyone they follow."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import Follow, Post, User

from .pagination import PageRequest
from .reactions import PostPage, PostRow, build_post_page
from .viewer import Identified


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def _desc(column: Any) -> Any:
    return cast(Any, column).desc()


def feed_author_filter(viewer_id: str) -> ColumnElement[bool]:
    """Match posts authored by the viewer or by anyone the viewer follows."""
    followee_ids = select(Follow.followee_id).where(_eq(Follow.follower_id, viewer_id))
    author_column = cast(ColumnElement[str], Post.author_id)
    return or_(_eq(author_column, viewer_id), author_column.in_(followee_ids))


async def compose_feed(
    session: AsyncSession,
    *,
    viewer_id: str,
    page: PageRequest,
) -> PostPage:
    author_filter = feed_author_filter(viewer_id)

    total_result = await session.execute(
        select(func.count()).select_from(Post).where(author_filter)
    )
    total = int(total_result.scalar_one() or 0)

    result = await session.execute(
        select(Post, User)
        .join(User, _eq(User.id, Post.author_id))
        .where(author_filter)
        .order_by(_desc(Post.created_at), _desc(Post.id))
        .offset(page.offset)
        .limit(page.limit)
    )
    rows = cast(list[PostRow], list(result.all()))
    return await build_post_page(
        session,
        rows=rows,
        total=total,
        page=page,
        viewer=Identified(viewer_id),
    )


__all__ = ["compose_feed", "feed_author_filter"]
