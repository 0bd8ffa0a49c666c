"""Like, unlike and liker-list endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db, get_viewer
from models import User
from services import reactions
from services.pagination import PageRequest
from services.reactions import LikeState
from services.viewer import Viewer

from .envelope import CamelModel, Envelope, ok
from .pagination import page_params
from .user_views import LikerListView, liker_list_view

router = APIRouter(prefix="/posts", tags=["likes"])


class LikeStatusView(CamelModel):
    liked: bool
    like_count: int

    @classmethod
    def from_state(cls, state: LikeState) -> "LikeStatusView":
        return cls(liked=state.liked, like_count=state.like_count)


@router.post("/{post_id}/like", response_model=Envelope[LikeStatusView])
async def like_post(
    post_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[LikeStatusView]:
    state = await reactions.like_post(session, user_id=current_user.id, post_id=post_id)
    message = "Liked" if state.changed else "Already liked"
    return ok(LikeStatusView.from_state(state), message)


@router.delete("/{post_id}/like", response_model=Envelope[LikeStatusView])
async def unlike_post(
    post_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[LikeStatusView]:
    state = await reactions.unlike_post(session, user_id=current_user.id, post_id=post_id)
    message = "Unliked" if state.changed else "Not liked"
    return ok(LikeStatusView.from_state(state), message)


@router.get("/{post_id}/likes", response_model=Envelope[LikerListView])
async def list_post_likes(
    post_id: int,
    page: PageRequest = Depends(page_params),
    session: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
) -> Envelope[LikerListView]:
    result = await reactions.list_likers(session, post_id=post_id, page=page, viewer=viewer)
    return ok(liker_list_view(result))
