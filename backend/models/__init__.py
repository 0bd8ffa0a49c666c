"""SQLModel models package."""

from .comment import Comment
from .follow import Follow
from .like import Like
from .post import Post
from .saved_post import SavedPost
from .user import User

__all__ = [
    "User",
    "Follow",
    "Post",
    "Like",
    "Comment",
    "SavedPost",
]
