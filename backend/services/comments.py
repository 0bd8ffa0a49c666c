"""Comment threads on posts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, cast

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import Comment, User

from .counters import sync_comment_count
from .errors import Forbidden, InvalidOperation, NotFound
from .pagination import Page, PageRequest
from .reactions import require_post

MAX_COMMENT_LENGTH = 500

CommentRow = tuple[Comment, User]


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def _desc(column: Any) -> Any:
    return cast(Any, column).desc()


@dataclass
class CommentPage(Page[CommentRow]):
    pass


def normalize_comment_text(text: str) -> str:
    normalized = text.strip()
    if not normalized:
        raise InvalidOperation("Comment text is required")
    if len(normalized) > MAX_COMMENT_LENGTH:
        raise InvalidOperation(
            f"Comment must be at most {MAX_COMMENT_LENGTH} characters"
        )
    return normalized


async def list_comments(
    session: AsyncSession,
    *,
    post_id: int,
    page: PageRequest,
) -> CommentPage:
    """Comments on ``post_id``, newest first."""
    await require_post(session, post_id)

    total_result = await session.execute(
        select(func.count()).select_from(Comment).where(_eq(Comment.post_id, post_id))
    )
    total = int(total_result.scalar_one() or 0)

    result = await session.execute(
        select(Comment, User)
        .join(User, _eq(User.id, Comment.author_id))
        .where(_eq(Comment.post_id, post_id))
        .order_by(_desc(Comment.created_at), _desc(Comment.id))
        .offset(page.offset)
        .limit(page.limit)
    )
    rows = cast(list[CommentRow], list(result.all()))
    return CommentPage(items=rows, total=total, page=page.page, limit=page.limit)


async def create_comment(
    session: AsyncSession,
    *,
    post_id: int,
    author: User,
    text: str,
) -> Comment:
    normalized = normalize_comment_text(text)
    await require_post(session, post_id)

    comment = Comment(post_id=post_id, author_id=author.id, text=normalized)
    session.add(comment)
    await session.flush()
    await sync_comment_count(session, post_id)
    await session.commit()
    await session.refresh(comment)
    return comment


async def delete_comment(
    session: AsyncSession,
    *,
    comment_id: int,
    user_id: str,
) -> None:
    """Delete a comment; only its author may do so."""
    result = await session.execute(select(Comment).where(_eq(Comment.id, comment_id)))
    comment = result.scalar_one_or_none()
    if comment is None:
        raise NotFound("Comment not found")
    if comment.author_id != user_id:
        raise Forbidden("You can only delete your own comments")

    post_id = comment.post_id
    await session.delete(comment)
    await session.flush()
    await sync_comment_count(session, post_id)
    await session.commit()


__all__ = [
    "CommentPage",
    "CommentRow",
    "MAX_COMMENT_LENGTH",
    "create_comment",
    "delete_comment",
    "list_comments",
    "normalize_comment_text",
]
