"""Version 1 API router."""

from fastapi import APIRouter

from . import auth, comments, feed, follows, likes, me, posts, saves, users

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(me.router)
api_router.include_router(users.router)
api_router.include_router(follows.router)
api_router.include_router(posts.router)
api_router.include_router(likes.router)
api_router.include_router(saves.router)
api_router.include_router(comments.router)
api_router.include_router(feed.router)
