"""Public user endpoints: search, profiles and per-user lists."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_db, get_viewer
from services import graph, posts, profiles, reactions
from services.pagination import PageRequest
from services.viewer import Viewer

from .envelope import Envelope, ok
from .pagination import PaginationMeta, page_params
from .post_views import PostListView, post_views
from .user_views import PublicProfileView, UserListView, user_list_view

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/search", response_model=Envelope[UserListView])
async def search_users(
    q: str = Query(..., min_length=1, max_length=100),
    page: PageRequest = Depends(page_params),
    session: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
) -> Envelope[UserListView]:
    """Users whose username or name contains ``q``; never 404s."""
    result = await profiles.search_users(session, query=q, page=page, viewer=viewer)
    return ok(user_list_view(result))


@router.get("/{username}", response_model=Envelope[PublicProfileView])
async def get_user_profile(
    username: str,
    session: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
) -> Envelope[PublicProfileView]:
    profile = await profiles.get_profile(session, username=username, viewer=viewer)
    return ok(PublicProfileView.from_profile(profile))


@router.get("/{username}/posts", response_model=Envelope[PostListView])
async def list_user_posts(
    username: str,
    page: PageRequest = Depends(page_params),
    session: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
) -> Envelope[PostListView]:
    result = await posts.list_user_posts(session, username=username, page=page, viewer=viewer)
    return ok(PostListView(posts=post_views(result), pagination=PaginationMeta.from_page(result)))


@router.get("/{username}/likes", response_model=Envelope[PostListView])
async def list_user_likes(
    username: str,
    page: PageRequest = Depends(page_params),
    session: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
) -> Envelope[PostListView]:
    user = await graph.get_user_by_username(session, username)
    result = await reactions.list_liked_posts(session, user_id=user.id, page=page, viewer=viewer)
    return ok(PostListView(posts=post_views(result), pagination=PaginationMeta.from_page(result)))


@router.get("/{username}/followers", response_model=Envelope[UserListView])
async def list_followers(
    username: str,
    page: PageRequest = Depends(page_params),
    session: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
) -> Envelope[UserListView]:
    user = await graph.get_user_by_username(session, username)
    result = await graph.list_followers(session, owner_id=user.id, page=page, viewer=viewer)
    return ok(user_list_view(result))


@router.get("/{username}/following", response_model=Envelope[UserListView])
async def list_following(
    username: str,
    page: PageRequest = Depends(page_params),
    session: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
) -> Envelope[UserListView]:
    user = await graph.get_user_by_username(session, username)
    result = await graph.list_following(session, owner_id=user.id, page=page, viewer=viewer)
    return ok(user_list_view(result))
