"""Comment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db, get_viewer
from models import User
from services import comments
from services.pagination import PageRequest
from services.viewer import Viewer, viewer_id_of

from .envelope import Envelope, ok
from .pagination import PaginationMeta, comment_page_params
from .post_views import CommentListView, CommentView

router = APIRouter(tags=["comments"])


class CommentCreateRequest(BaseModel):
    text: str = Field(min_length=1, max_length=comments.MAX_COMMENT_LENGTH)


@router.get("/posts/{post_id}/comments", response_model=Envelope[CommentListView])
async def list_comments(
    post_id: int,
    page: PageRequest = Depends(comment_page_params),
    session: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
) -> Envelope[CommentListView]:
    result = await comments.list_comments(session, post_id=post_id, page=page)
    viewer_id = viewer_id_of(viewer)
    return ok(
        CommentListView(
            comments=[
                CommentView.from_comment(comment, author, viewer_id=viewer_id)
                for comment, author in result.items
            ],
            pagination=PaginationMeta.from_page(result),
        )
    )


@router.post(
    "/posts/{post_id}/comments",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[CommentView],
)
async def create_comment(
    post_id: int,
    payload: CommentCreateRequest,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[CommentView]:
    comment = await comments.create_comment(
        session,
        post_id=post_id,
        author=current_user,
        text=payload.text,
    )
    return ok(
        CommentView.from_comment(comment, current_user, viewer_id=current_user.id),
        "Comment added",
    )


@router.delete("/comments/{comment_id}", response_model=Envelope[None])
async def delete_comment(
    comment_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[None]:
    await comments.delete_comment(session, comment_id=comment_id, user_id=current_user.id)
    return ok(None, "Comment deleted")
