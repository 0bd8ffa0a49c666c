"""Post endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db, get_viewer
from models import User
from services import posts
from services.viewer import Viewer

from .envelope import Envelope, ok
from .post_views import PostView
from .uploads import read_image_upload

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=Envelope[PostView])
async def create_post(
    image: UploadFile = File(...),
    caption: str | None = Form(default=None),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[PostView]:
    data = await read_image_upload(image)
    post = await posts.create_post(
        session,
        author=current_user,
        image_data=data,
        caption=caption,
    )
    return ok(PostView.from_post(post, current_user), "Post created")


@router.get("/{post_id}", response_model=Envelope[PostView])
async def get_post(
    post_id: int,
    session: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
) -> Envelope[PostView]:
    detail = await posts.get_post(session, post_id=post_id, viewer=viewer)
    return ok(
        PostView.from_post(
            detail.post,
            detail.author,
            liked_by_me=detail.liked_by_me,
            saved_by_me=detail.saved_by_me,
        )
    )


@router.delete("/{post_id}", response_model=Envelope[None])
async def delete_post(
    post_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[None]:
    await posts.delete_post(session, post_id=post_id, user_id=current_user.id)
    return ok(None, "Post deleted")
