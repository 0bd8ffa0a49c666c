"""Profile aggregation and user search."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, cast

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import Follow, Like, Post, User

from .graph import UserPage, followed_by_viewer, get_user_by_username, is_following
from .pagination import PageRequest
from .viewer import Viewer, viewer_id_of

_WHITESPACE = re.compile(r"\s+")


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def _ilike(column: Any, pattern: str) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column.ilike(pattern, escape="\\"))


@dataclass(frozen=True)
class ProfileStats:
    posts: int
    followers: int
    following: int
    likes: int


@dataclass(frozen=True)
class Profile:
    user: User
    stats: ProfileStats
    is_following: bool
    is_me: bool


async def profile_stats(session: AsyncSession, user_id: str) -> ProfileStats:
    """Posts, followers, following and likes received, in one statement."""

    def _count(*criteria: ColumnElement[bool], source: Any) -> Any:
        return select(func.count()).select_from(source).where(*criteria).scalar_subquery()

    likes_received = (
        select(func.count())
        .select_from(Like)
        .join(Post, _eq(Post.id, Like.post_id))
        .where(_eq(Post.author_id, user_id))
        .scalar_subquery()
    )
    result = await session.execute(
        select(
            _count(_eq(Post.author_id, user_id), source=Post).label("posts"),
            _count(_eq(Follow.followee_id, user_id), source=Follow).label("followers"),
            _count(_eq(Follow.follower_id, user_id), source=Follow).label("following"),
            likes_received.label("likes"),
        )
    )
    row = result.one()
    return ProfileStats(
        posts=int(row.posts or 0),
        followers=int(row.followers or 0),
        following=int(row.following or 0),
        likes=int(row.likes or 0),
    )


async def get_profile(
    session: AsyncSession,
    *,
    username: str,
    viewer: Viewer,
) -> Profile:
    user = await get_user_by_username(session, username)
    viewer_id = viewer_id_of(viewer)
    is_me = viewer_id == user.id
    following = False
    if viewer_id is not None and not is_me:
        following = await is_following(session, follower_id=viewer_id, followee_id=user.id)
    return Profile(
        user=user,
        stats=await profile_stats(session, user.id),
        is_following=following,
        is_me=is_me,
    )


async def get_my_profile(session: AsyncSession, user: User) -> Profile:
    return Profile(
        user=user,
        stats=await profile_stats(session, user.id),
        is_following=False,
        is_me=True,
    )


def normalize_search_query(query: str) -> str:
    return _WHITESPACE.sub(" ", query).strip()


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def search_users(
    session: AsyncSession,
    *,
    query: str,
    page: PageRequest,
    viewer: Viewer,
) -> UserPage:
    """Case-insensitive substring match on username or name.

    A blank query yields an empty page rather than an error.
    """
    term = normalize_search_query(query)
    if not term:
        return UserPage(items=[], total=0, page=page.page, limit=page.limit)

    pattern = f"%{_escape_like(term)}%"
    match = or_(
        _ilike(cast(Any, User.username), pattern),
        _ilike(cast(Any, User.name), pattern),
    )

    total_result = await session.execute(select(func.count()).select_from(User).where(match))
    total = int(total_result.scalar_one() or 0)

    result = await session.execute(
        select(User)
        .where(match)
        .order_by(cast(Any, User.username).asc())
        .offset(page.offset)
        .limit(page.limit)
    )
    users = list(result.scalars().all())
    followed = await followed_by_viewer(session, viewer, [user.id for user in users])
    return UserPage(
        items=users,
        total=total,
        page=page.page,
        limit=page.limit,
        followed_by_viewer=followed,
    )


__all__ = [
    "Profile",
    "ProfileStats",
    "get_my_profile",
    "get_profile",
    "normalize_search_query",
    "profile_stats",
    "search_users",
]
