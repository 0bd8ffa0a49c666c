"""Home feed endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db
from models import User
from services.feed import compose_feed
from services.pagination import PageRequest

from .envelope import Envelope, ok
from .pagination import PaginationMeta, page_params
from .post_views import FeedView, post_views

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("", response_model=Envelope[FeedView])
async def get_feed(
    page: PageRequest = Depends(page_params),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[FeedView]:
    """Posts by the current user and everyone they follow, newest first."""
    result = await compose_feed(session, viewer_id=current_user.id, page=page)
    return ok(FeedView(items=post_views(result), pagination=PaginationMeta.from_page(result)))
