"""Post creation, lookup, deletion and per-author listings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, cast
from uuid import uuid4

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import Comment, Like, Post, SavedPost, User

from .errors import Forbidden, InvalidOperation, NotFound
from .graph import get_user_by_username
from .media import discard_object, prepare_image, store_image
from .pagination import PageRequest
from .reactions import PostPage, PostRow, build_post_page, liked_post_ids, saved_post_ids
from .viewer import Viewer

logger = logging.getLogger(__name__)

MAX_POST_CAPTION_LENGTH = 1000


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def _desc(column: Any) -> Any:
    return cast(Any, column).desc()


@dataclass(frozen=True)
class PostDetail:
    post: Post
    author: User
    liked_by_me: bool
    saved_by_me: bool


def normalize_caption(caption: str | None) -> str | None:
    if caption is None:
        return None

    normalized_caption = caption.strip()
    if len(normalized_caption) > MAX_POST_CAPTION_LENGTH:
        raise InvalidOperation(
            f"Caption must be at most {MAX_POST_CAPTION_LENGTH} characters"
        )
    if normalized_caption == "":
        return None
    return normalized_caption


async def create_post(
    session: AsyncSession,
    *,
    author: User,
    image_data: bytes,
    caption: str | None,
) -> Post:
    """Normalize and upload the image, then insert the post row.

    The uploaded object is removed again if the row cannot be committed.
    """
    normalized_caption = normalize_caption(caption)
    processed_bytes, content_type = await prepare_image(image_data)

    object_key = f"posts/{author.id}/{uuid4().hex}.jpg"
    image_url = await store_image(object_key, processed_bytes, content_type)

    post = Post(
        author_id=author.id,
        image_key=object_key,
        image_url=image_url,
        caption=normalized_caption,
    )
    session.add(post)
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        await discard_object(object_key)
        raise
    await session.refresh(post)
    logger.info("Post created", extra={"post_id": post.id, "author_id": author.id})
    return post


async def get_post(
    session: AsyncSession,
    *,
    post_id: int,
    viewer: Viewer,
) -> PostDetail:
    result = await session.execute(
        select(Post, User)
        .join(User, _eq(User.id, Post.author_id))
        .where(_eq(Post.id, post_id))
    )
    row = result.one_or_none()
    if row is None:
        raise NotFound("Post not found")
    post, author = row
    return PostDetail(
        post=post,
        author=author,
        liked_by_me=post_id in await liked_post_ids(session, viewer, [post_id]),
        saved_by_me=post_id in await saved_post_ids(session, viewer, [post_id]),
    )


async def delete_post(
    session: AsyncSession,
    *,
    post_id: int,
    user_id: str,
) -> None:
    """Delete a post and its likes, comments and saves in one transaction."""
    result = await session.execute(select(Post).where(_eq(Post.id, post_id)))
    post = result.scalar_one_or_none()
    if post is None:
        raise NotFound("Post not found")
    if post.author_id != user_id:
        raise Forbidden("You can only delete your own posts")

    object_key = post.image_key
    await session.execute(delete(Like).where(_eq(Like.post_id, post_id)))
    await session.execute(delete(Comment).where(_eq(Comment.post_id, post_id)))
    await session.execute(delete(SavedPost).where(_eq(SavedPost.post_id, post_id)))
    await session.delete(post)
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    await discard_object(object_key)


async def list_user_posts(
    session: AsyncSession,
    *,
    username: str,
    page: PageRequest,
    viewer: Viewer,
) -> PostPage:
    author = await get_user_by_username(session, username)

    total_result = await session.execute(
        select(func.count()).select_from(Post).where(_eq(Post.author_id, author.id))
    )
    total = int(total_result.scalar_one() or 0)

    result = await session.execute(
        select(Post)
        .where(_eq(Post.author_id, author.id))
        .order_by(_desc(Post.created_at), _desc(Post.id))
        .offset(page.offset)
        .limit(page.limit)
    )
    rows: list[PostRow] = [(post, author) for post in result.scalars().all()]
    return await build_post_page(session, rows=rows, total=total, page=page, viewer=viewer)


__all__ = [
    "MAX_POST_CAPTION_LENGTH",
    "PostDetail",
    "create_post",
    "delete_post",
    "get_post",
    "list_user_posts",
    "normalize_caption",
]
