"""Save and unsave endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db
from models import User
from services import reactions

from .envelope import CamelModel, Envelope, ok

router = APIRouter(prefix="/posts", tags=["saves"])


class SaveStatusView(CamelModel):
    saved: bool


@router.post("/{post_id}/save", response_model=Envelope[SaveStatusView])
async def save_post(
    post_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[SaveStatusView]:
    state = await reactions.save_post(session, user_id=current_user.id, post_id=post_id)
    return ok(SaveStatusView(saved=state.saved), "Saved" if state.changed else "Already saved")


@router.delete("/{post_id}/save", response_model=Envelope[SaveStatusView])
async def unsave_post(
    post_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[SaveStatusView]:
    state = await reactions.unsave_post(session, user_id=current_user.id, post_id=post_id)
    return ok(SaveStatusView(saved=state.saved), "Unsaved" if state.changed else "Not saved")
