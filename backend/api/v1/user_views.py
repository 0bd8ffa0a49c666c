"""Shared user and profile view models."""

from __future__ import annotations

from datetime import datetime

from models import User
from services.graph import UserPage
from services.profiles import Profile, ProfileStats
from services.reactions import LikerPage

from .envelope import CamelModel
from .pagination import PaginationMeta


class UserSummary(CamelModel):
    id: str
    username: str
    name: str | None = None
    avatar_url: str | None = None
    is_followed_by_me: bool = False

    @classmethod
    def from_user(cls, user: User, *, is_followed_by_me: bool = False) -> "UserSummary":
        return cls(
            id=user.id,
            username=user.username,
            name=user.name,
            avatar_url=user.avatar_url,
            is_followed_by_me=is_followed_by_me,
        )


class LikerSummary(UserSummary):
    is_me: bool = False
    follows_me: bool = False


class UserListView(CamelModel):
    users: list[UserSummary]
    pagination: PaginationMeta


class LikerListView(CamelModel):
    users: list[LikerSummary]
    pagination: PaginationMeta


def user_list_view(page: UserPage) -> UserListView:
    return UserListView(
        users=[
            UserSummary.from_user(user, is_followed_by_me=user.id in page.followed_by_viewer)
            for user in page.items
        ],
        pagination=PaginationMeta.from_page(page),
    )


def liker_list_view(page: LikerPage) -> LikerListView:
    relations = page.relations
    return LikerListView(
        users=[
            LikerSummary(
                id=user.id,
                username=user.username,
                name=user.name,
                avatar_url=user.avatar_url,
                is_followed_by_me=user.id in relations.i_follow,
                is_me=page.viewer_id is not None and user.id == page.viewer_id,
                follows_me=user.id in relations.follows_me,
            )
            for user in page.items
        ],
        pagination=PaginationMeta.from_page(page),
    )


class StatsView(CamelModel):
    posts: int
    followers: int
    following: int
    likes: int

    @classmethod
    def from_stats(cls, stats: ProfileStats) -> "StatsView":
        return cls(
            posts=stats.posts,
            followers=stats.followers,
            following=stats.following,
            likes=stats.likes,
        )


class PublicProfileView(CamelModel):
    id: str
    name: str | None = None
    username: str
    bio: str | None = None
    avatar_url: str | None = None
    counts: StatsView
    is_following: bool = False
    is_me: bool = False

    @classmethod
    def from_profile(cls, profile: Profile) -> "PublicProfileView":
        user = profile.user
        return cls(
            id=user.id,
            name=user.name,
            username=user.username,
            bio=user.bio,
            avatar_url=user.avatar_url,
            counts=StatsView.from_stats(profile.stats),
            is_following=profile.is_following,
            is_me=profile.is_me,
        )


class AccountView(CamelModel):
    """The authenticated user's own account details."""

    id: str
    name: str | None = None
    username: str
    email: str
    phone: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    created_at: datetime


class MeView(CamelModel):
    profile: AccountView
    stats: StatsView

    @classmethod
    def from_profile(cls, profile: Profile) -> "MeView":
        return cls(
            profile=AccountView.model_validate(profile.user),
            stats=StatsView.from_stats(profile.stats),
        )
