"""Shared post and comment view models."""

from __future__ import annotations

from datetime import datetime

from models import Comment, Post, User
from services.reactions import PostPage

from .envelope import CamelModel
from .pagination import PaginationMeta


class AuthorView(CamelModel):
    id: str
    username: str
    name: str | None = None
    avatar_url: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "AuthorView":
        return cls(
            id=user.id,
            username=user.username,
            name=user.name,
            avatar_url=user.avatar_url,
        )


class PostView(CamelModel):
    id: int
    image_url: str
    caption: str | None = None
    like_count: int = 0
    comment_count: int = 0
    created_at: datetime
    author: AuthorView
    liked_by_me: bool = False
    saved_by_me: bool = False

    @classmethod
    def from_post(
        cls,
        post: Post,
        author: User,
        *,
        liked_by_me: bool = False,
        saved_by_me: bool = False,
    ) -> "PostView":
        if post.id is None:
            raise ValueError("Post record missing identifier")
        return cls(
            id=post.id,
            image_url=post.image_url,
            caption=post.caption,
            like_count=post.like_count,
            comment_count=post.comment_count,
            created_at=post.created_at,
            author=AuthorView.from_user(author),
            liked_by_me=liked_by_me,
            saved_by_me=saved_by_me,
        )


class PostListView(CamelModel):
    posts: list[PostView]
    pagination: PaginationMeta


class FeedView(CamelModel):
    items: list[PostView]
    pagination: PaginationMeta


def post_views(page: PostPage) -> list[PostView]:
    return [
        PostView.from_post(
            post,
            author,
            liked_by_me=post.id in page.liked_ids,
            saved_by_me=post.id in page.saved_ids,
        )
        for post, author in page.items
    ]


class CommentView(CamelModel):
    id: int
    post_id: int
    text: str
    created_at: datetime
    author: AuthorView
    is_mine: bool = False

    @classmethod
    def from_comment(
        cls,
        comment: Comment,
        author: User,
        *,
        viewer_id: str | None = None,
    ) -> "CommentView":
        if comment.id is None:
            raise ValueError("Comment record missing identifier")
        return cls(
            id=comment.id,
            post_id=comment.post_id,
            text=comment.text,
            created_at=comment.created_at,
            author=AuthorView.from_user(author),
            is_mine=viewer_id is not None and comment.author_id == viewer_id,
        )


class CommentListView(CamelModel):
    comments: list[CommentView]
    pagination: PaginationMeta
