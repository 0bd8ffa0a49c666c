"""Follow graph reads and writes."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, cast

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from db.errors import is_unique_violation
from models import Follow, User

from .errors import InvalidOperation, NotFound
from .pagination import Page, PageRequest
from .viewer import Viewer, viewer_id_of


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def _desc(column: Any) -> Any:
    return cast(Any, column).desc()


@dataclass(frozen=True)
class FollowState:
    following: bool
    changed: bool


@dataclass
class UserPage(Page[User]):
    """Users plus the subset of them the viewer follows."""

    followed_by_viewer: set[str] = field(default_factory=set)


@dataclass
class FollowRelations:
    i_follow: set[str] = field(default_factory=set)
    follows_me: set[str] = field(default_factory=set)


async def get_user_by_username(session: AsyncSession, username: str) -> User:
    result = await session.execute(select(User).where(_eq(User.username, username)))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("User not found")
    return user


async def is_following(
    session: AsyncSession,
    *,
    follower_id: str,
    followee_id: str,
) -> bool:
    result = await session.execute(
        select(Follow).where(
            _eq(Follow.follower_id, follower_id),
            _eq(Follow.followee_id, followee_id),
        )
    )
    return result.scalar_one_or_none() is not None


async def follow_user(
    session: AsyncSession,
    *,
    follower_id: str,
    target_username: str,
) -> FollowState:
    target = await get_user_by_username(session, target_username)
    if target.id == follower_id:
        raise InvalidOperation("You cannot follow yourself")

    if await is_following(session, follower_id=follower_id, followee_id=target.id):
        return FollowState(following=True, changed=False)

    session.add(Follow(follower_id=follower_id, followee_id=target.id))
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            return FollowState(following=True, changed=False)
        raise
    return FollowState(following=True, changed=True)


async def unfollow_user(
    session: AsyncSession,
    *,
    follower_id: str,
    target_username: str,
) -> FollowState:
    target = await get_user_by_username(session, target_username)
    result = await session.execute(
        delete(Follow).where(
            _eq(Follow.follower_id, follower_id),
            _eq(Follow.followee_id, target.id),
        )
    )
    await session.commit()
    return FollowState(following=False, changed=bool(result.rowcount))


async def followed_by_viewer(
    session: AsyncSession,
    viewer: Viewer,
    user_ids: Iterable[str],
) -> set[str]:
    """Return the ids in ``user_ids`` that the viewer follows, in one query."""
    viewer_id = viewer_id_of(viewer)
    ids = list(set(user_ids))
    if viewer_id is None or not ids:
        return set()

    followee_column = cast(ColumnElement[str], Follow.followee_id)
    result = await session.execute(
        select(followee_column).where(
            _eq(Follow.follower_id, viewer_id),
            followee_column.in_(ids),
        )
    )
    return set(result.scalars().all())


async def follow_relations(
    session: AsyncSession,
    viewer: Viewer,
    user_ids: Iterable[str],
) -> FollowRelations:
    """Both follow directions between the viewer and ``user_ids`` in one query."""
    viewer_id = viewer_id_of(viewer)
    ids = list(set(user_ids) - {viewer_id})
    if viewer_id is None or not ids:
        return FollowRelations()

    follower_column = cast(ColumnElement[str], Follow.follower_id)
    followee_column = cast(ColumnElement[str], Follow.followee_id)
    result = await session.execute(
        select(follower_column, followee_column).where(
            or_(
                and_(_eq(follower_column, viewer_id), followee_column.in_(ids)),
                and_(_eq(followee_column, viewer_id), follower_column.in_(ids)),
            )
        )
    )
    relations = FollowRelations()
    for follower_id, followee_id in result.all():
        if follower_id == viewer_id:
            relations.i_follow.add(followee_id)
        else:
            relations.follows_me.add(follower_id)
    return relations


async def _list_edge_users(
    session: AsyncSession,
    *,
    owner_id: str,
    page: PageRequest,
    viewer: Viewer,
    followers: bool,
) -> UserPage:
    if followers:
        anchor_column, listed_column = Follow.followee_id, Follow.follower_id
    else:
        anchor_column, listed_column = Follow.follower_id, Follow.followee_id

    total_result = await session.execute(
        select(func.count()).select_from(Follow).where(_eq(anchor_column, owner_id))
    )
    total = int(total_result.scalar_one() or 0)

    result = await session.execute(
        select(User)
        .join(Follow, _eq(listed_column, User.id))
        .where(_eq(anchor_column, owner_id))
        .order_by(_desc(Follow.created_at), _desc(User.id))
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


async def list_followers(
    session: AsyncSession,
    *,
    owner_id: str,
    page: PageRequest,
    viewer: Viewer,
) -> UserPage:
    return await _list_edge_users(
        session, owner_id=owner_id, page=page, viewer=viewer, followers=True
    )


async def list_following(
    session: AsyncSession,
    *,
    owner_id: str,
    page: PageRequest,
    viewer: Viewer,
) -> UserPage:
    return await _list_edge_users(
        session, owner_id=owner_id, page=page, viewer=viewer, followers=False
    )


__all__ = [
    "FollowRelations",
    "FollowState",
    "UserPage",
    "follow_relations",
    "follow_user",
    "followed_by_viewer",
    "get_user_by_username",
    "is_following",
    "list_followers",
    "list_following",
    "unfollow_user",
]
