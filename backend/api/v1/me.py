"""Endpoints for the authenticated user's own account."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db
from models import User
from services import graph, identity, profiles, reactions
from services.pagination import PageRequest
from services.viewer import Identified

from .envelope import Envelope, ok
from .pagination import PaginationMeta, page_params
from .post_views import PostListView, post_views
from .uploads import read_image_upload
from .user_views import MeView, UserListView, user_list_view

router = APIRouter(prefix="/me", tags=["me"])


@router.get("", response_model=Envelope[MeView])
async def get_me(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[MeView]:
    profile = await profiles.get_my_profile(session, current_user)
    return ok(MeView.from_profile(profile))


@router.patch("", response_model=Envelope[MeView])
async def update_me(
    name: str | None = Form(default=None),
    username: str | None = Form(default=None),
    phone: str | None = Form(default=None),
    bio: str | None = Form(default=None),
    avatar: UploadFile | None = File(default=None),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[MeView]:
    avatar_data = await read_image_upload(avatar) if avatar is not None else None
    user = await identity.update_profile(
        session,
        user=current_user,
        name=name,
        username=username,
        phone=phone,
        bio=bio,
        avatar_data=avatar_data,
    )
    profile = await profiles.get_my_profile(session, user)
    return ok(MeView.from_profile(profile), "Profile updated")


@router.get("/followers", response_model=Envelope[UserListView])
async def list_my_followers(
    page: PageRequest = Depends(page_params),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[UserListView]:
    result = await graph.list_followers(
        session,
        owner_id=current_user.id,
        page=page,
        viewer=Identified(current_user.id),
    )
    return ok(user_list_view(result))


@router.get("/following", response_model=Envelope[UserListView])
async def list_my_following(
    page: PageRequest = Depends(page_params),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[UserListView]:
    result = await graph.list_following(
        session,
        owner_id=current_user.id,
        page=page,
        viewer=Identified(current_user.id),
    )
    return ok(user_list_view(result))


@router.get("/likes", response_model=Envelope[PostListView])
async def list_my_likes(
    page: PageRequest = Depends(page_params),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[PostListView]:
    result = await reactions.list_liked_posts(
        session,
        user_id=current_user.id,
        page=page,
        viewer=Identified(current_user.id),
    )
    return ok(PostListView(posts=post_views(result), pagination=PaginationMeta.from_page(result)))


@router.get("/saved", response_model=Envelope[PostListView])
async def list_my_saved(
    page: PageRequest = Depends(page_params),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[PostListView]:
    result = await reactions.list_saved_posts(session, user_id=current_user.id, page=page)
    return ok(PostListView(posts=post_views(result), pagination=PaginationMeta.from_page(result)))
