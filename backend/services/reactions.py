"""Likes and saves: idempotent edge toggles plus the batched viewer lookups."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, cast

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from db.errors import is_unique_violation
from models import Like, Post, SavedPost, User

from .counters import decrement_like_count, increment_like_count, read_like_count
from .errors import NotFound
from .graph import FollowRelations, follow_relations
from .pagination import Page, PageRequest
from .viewer import Identified, Viewer, viewer_id_of


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def _desc(column: Any) -> Any:
    return cast(Any, column).desc()


PostRow = tuple[Post, User]


@dataclass(frozen=True)
class LikeState:
    liked: bool
    like_count: int
    changed: bool


@dataclass(frozen=True)
class SaveState:
    saved: bool
    changed: bool


@dataclass
class PostPage(Page[PostRow]):
    """Posts with their authors and the viewer's like/save marks."""

    liked_ids: set[int] = field(default_factory=set)
    saved_ids: set[int] = field(default_factory=set)


@dataclass
class LikerPage(Page[User]):
    viewer_id: str | None = None
    relations: FollowRelations = field(default_factory=FollowRelations)


async def require_post(session: AsyncSession, post_id: int) -> Post:
    result = await session.execute(select(Post).where(_eq(Post.id, post_id)))
    post = result.scalar_one_or_none()
    if post is None:
        raise NotFound("Post not found")
    return post


async def has_liked(session: AsyncSession, *, user_id: str, post_id: int) -> bool:
    result = await session.execute(
        select(Like).where(_eq(Like.user_id, user_id), _eq(Like.post_id, post_id))
    )
    return result.scalar_one_or_none() is not None


async def like_post(session: AsyncSession, *, user_id: str, post_id: int) -> LikeState:
    await require_post(session, post_id)
    if await has_liked(session, user_id=user_id, post_id=post_id):
        return LikeState(
            liked=True,
            like_count=await read_like_count(session, post_id),
            changed=False,
        )

    session.add(Like(user_id=user_id, post_id=post_id))
    try:
        await session.flush()
        await increment_like_count(session, post_id)
        like_count = await read_like_count(session, post_id)
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if not is_unique_violation(exc):
            raise
        # A concurrent request inserted the same edge first.
        return LikeState(
            liked=True,
            like_count=await read_like_count(session, post_id),
            changed=False,
        )
    return LikeState(liked=True, like_count=like_count, changed=True)


async def unlike_post(session: AsyncSession, *, user_id: str, post_id: int) -> LikeState:
    await require_post(session, post_id)
    result = await session.execute(
        delete(Like).where(_eq(Like.user_id, user_id), _eq(Like.post_id, post_id))
    )
    if not result.rowcount:
        await session.rollback()
        return LikeState(
            liked=False,
            like_count=await read_like_count(session, post_id),
            changed=False,
        )

    await decrement_like_count(session, post_id)
    like_count = await read_like_count(session, post_id)
    await session.commit()
    return LikeState(liked=False, like_count=like_count, changed=True)


async def has_saved(session: AsyncSession, *, user_id: str, post_id: int) -> bool:
    result = await session.execute(
        select(SavedPost).where(
            _eq(SavedPost.user_id, user_id),
            _eq(SavedPost.post_id, post_id),
        )
    )
    return result.scalar_one_or_none() is not None


async def save_post(session: AsyncSession, *, user_id: str, post_id: int) -> SaveState:
    await require_post(session, post_id)
    if await has_saved(session, user_id=user_id, post_id=post_id):
        return SaveState(saved=True, changed=False)

    session.add(SavedPost(user_id=user_id, post_id=post_id))
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            return SaveState(saved=True, changed=False)
        raise
    return SaveState(saved=True, changed=True)


async def unsave_post(session: AsyncSession, *, user_id: str, post_id: int) -> SaveState:
    result = await session.execute(
        delete(SavedPost).where(
            _eq(SavedPost.user_id, user_id),
            _eq(SavedPost.post_id, post_id),
        )
    )
    await session.commit()
    return SaveState(saved=False, changed=bool(result.rowcount))


async def liked_post_ids(
    session: AsyncSession,
    viewer: Viewer,
    post_ids: Iterable[int],
) -> set[int]:
    """Return the ids in ``post_ids`` the viewer has liked, in one query."""
    viewer_id = viewer_id_of(viewer)
    ids = list(set(post_ids))
    if viewer_id is None or not ids:
        return set()

    post_id_column = cast(ColumnElement[int], Like.post_id)
    result = await session.execute(
        select(post_id_column).where(
            _eq(Like.user_id, viewer_id),
            post_id_column.in_(ids),
        )
    )
    return set(result.scalars().all())


async def saved_post_ids(
    session: AsyncSession,
    viewer: Viewer,
    post_ids: Iterable[int],
) -> set[int]:
    viewer_id = viewer_id_of(viewer)
    ids = list(set(post_ids))
    if viewer_id is None or not ids:
        return set()

    post_id_column = cast(ColumnElement[int], SavedPost.post_id)
    result = await session.execute(
        select(post_id_column).where(
            _eq(SavedPost.user_id, viewer_id),
            post_id_column.in_(ids),
        )
    )
    return set(result.scalars().all())


async def build_post_page(
    session: AsyncSession,
    *,
    rows: list[PostRow],
    total: int,
    page: PageRequest,
    viewer: Viewer,
) -> PostPage:
    post_ids = [post.id for post, _author in rows if post.id is not None]
    return PostPage(
        items=rows,
        total=total,
        page=page.page,
        limit=page.limit,
        liked_ids=await liked_post_ids(session, viewer, post_ids),
        saved_ids=await saved_post_ids(session, viewer, post_ids),
    )


async def list_likers(
    session: AsyncSession,
    *,
    post_id: int,
    page: PageRequest,
    viewer: Viewer,
) -> LikerPage:
    await require_post(session, post_id)

    total_result = await session.execute(
        select(func.count()).select_from(Like).where(_eq(Like.post_id, post_id))
    )
    total = int(total_result.scalar_one() or 0)

    result = await session.execute(
        select(User)
        .join(Like, _eq(Like.user_id, User.id))
        .where(_eq(Like.post_id, post_id))
        .order_by(_desc(Like.created_at), _desc(User.id))
        .offset(page.offset)
        .limit(page.limit)
    )
    users = list(result.scalars().all())
    relations = await follow_relations(session, viewer, [user.id for user in users])
    return LikerPage(
        items=users,
        total=total,
        page=page.page,
        limit=page.limit,
        viewer_id=viewer_id_of(viewer),
        relations=relations,
    )


async def list_liked_posts(
    session: AsyncSession,
    *,
    user_id: str,
    page: PageRequest,
    viewer: Viewer,
) -> PostPage:
    """Posts ``user_id`` has liked, most recent like first."""
    total_result = await session.execute(
        select(func.count()).select_from(Like).where(_eq(Like.user_id, user_id))
    )
    total = int(total_result.scalar_one() or 0)

    result = await session.execute(
        select(Post, User)
        .join(Like, _eq(Like.post_id, Post.id))
        .join(User, _eq(User.id, Post.author_id))
        .where(_eq(Like.user_id, user_id))
        .order_by(_desc(Like.created_at), _desc(Post.id))
        .offset(page.offset)
        .limit(page.limit)
    )
    rows = cast(list[PostRow], list(result.all()))
    return await build_post_page(session, rows=rows, total=total, page=page, viewer=viewer)


async def list_saved_posts(
    session: AsyncSession,
    *,
    user_id: str,
    page: PageRequest,
) -> PostPage:
    """The user's saved posts, most recent save first."""
    total_result = await session.execute(
        select(func.count()).select_from(SavedPost).where(_eq(SavedPost.user_id, user_id))
    )
    total = int(total_result.scalar_one() or 0)

    result = await session.execute(
        select(Post, User)
        .join(SavedPost, _eq(SavedPost.post_id, Post.id))
        .join(User, _eq(User.id, Post.author_id))
        .where(_eq(SavedPost.user_id, user_id))
        .order_by(_desc(SavedPost.created_at), _desc(Post.id))
        .offset(page.offset)
        .limit(page.limit)
    )
    rows = cast(list[PostRow], list(result.all()))
    return await build_post_page(
        session, rows=rows, total=total, page=page, viewer=Identified(user_id)
    )


__all__ = [
    "LikeState",
    "LikerPage",
    "PostPage",
    "PostRow",
    "SaveState",
    "build_post_page",
    "has_liked",
    "has_saved",
    "like_post",
    "liked_post_ids",
    "list_liked_posts",
    "list_likers",
    "list_saved_posts",
    "require_post",
    "save_post",
    "saved_post_ids",
    "unlike_post",
    "unsave_post",
]
