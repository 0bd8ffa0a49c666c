"""Post model with denormalized engagement counters."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, func, text
from sqlmodel import Field, SQLModel


class Post(SQLModel, table=True):
    """Image post owned by a single user.

    ``like_count`` and ``comment_count`` are cached aggregates; only the
    counter helpers in ``services.counters`` write them.
    """

    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_author_created_at", "author_id", "created_at"),
    )

    id: int | None = Field(default=None, primary_key=True)
    author_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        )
    )
    image_key: str = Field(sa_column=Column(String(255), nullable=False))
    image_url: str = Field(sa_column=Column(String(512), nullable=False))
    caption: str | None = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    like_count: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, server_default=text("0")),
    )
    comment_count: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, server_default=text("0")),
    )
    created_at: datetime = Field(
        sa_column=Column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )
    )
    updated_at: datetime = Field(
        sa_column=Column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )
    )
