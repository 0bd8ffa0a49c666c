"""Follow and unfollow endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db
from models import User
from services import graph

from .envelope import CamelModel, Envelope, ok

router = APIRouter(prefix="/follow", tags=["follow"])


class FollowStatusView(CamelModel):
    following: bool


@router.post("/{username}", response_model=Envelope[FollowStatusView])
async def follow_user(
    username: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[FollowStatusView]:
    state = await graph.follow_user(
        session,
        follower_id=current_user.id,
        target_username=username,
    )
    message = "Followed" if state.changed else "Already following"
    return ok(FollowStatusView(following=state.following), message)


@router.delete("/{username}", response_model=Envelope[FollowStatusView])
async def unfollow_user(
    username: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[FollowStatusView]:
    state = await graph.unfollow_user(
        session,
        follower_id=current_user.id,
        target_username=username,
    )
    message = "Unfollowed" if state.changed else "Not following"
    return ok(FollowStatusView(following=state.following), message)
