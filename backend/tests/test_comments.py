"""Tests for comment threads and the stored comment counter."""

import logging
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import func, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession

from models import Comment, Post
from services import counters
from helpers import auth, create_post, register


async def _stored_comment_count(session: AsyncSession, post_id: int) -> int:
    result = await session.execute(select(Post.comment_count).where(Post.id == post_id))
    return int(result.scalar_one())


async def _comment(client: AsyncClient, user: dict, post_id: int, text: str) -> dict:
    response = await client.post(
        f"/api/v1/posts/{post_id}/comments", json={"text": text}, headers=auth(user)
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_create_comment_updates_count(
    async_client: AsyncClient, db_session: AsyncSession
):
    alice = await register(async_client, "alice")
    bob = await register(async_client, "bob")
    post = await create_post(async_client, alice)

    response = await async_client.post(
        f"/api/v1/posts/{post['id']}/comments",
        json={"text": "  great shot  "},
        headers=auth(bob),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["text"] == "great shot"
    assert data["postId"] == post["id"]
    assert data["author"]["username"] == bob["username"]
    assert data["isMine"] is True
    assert await _stored_comment_count(db_session, post["id"]) == 1

    view = await async_client.get(f"/api/v1/posts/{post['id']}")
    assert view.json()["data"]["commentCount"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   ", "x" * 501])
async def test_create_comment_rejects_bad_text(async_client: AsyncClient, text: str):
    alice = await register(async_client, "alice")
    post = await create_post(async_client, alice)

    response = await async_client.post(
        f"/api/v1/posts/{post['id']}/comments", json={"text": text}, headers=auth(alice)
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_comment_on_missing_post_returns_404(async_client: AsyncClient):
    alice = await register(async_client, "alice")

    created = await async_client.post(
        "/api/v1/posts/4040/comments", json={"text": "hello"}, headers=auth(alice)
    )
    listed = await async_client.get("/api/v1/posts/4040/comments")

    assert created.status_code == 404
    assert listed.status_code == 404


@pytest.mark.asyncio
async def test_list_comments_newest_first_with_ownership(
    async_client: AsyncClient, db_session: AsyncSession
):
    alice = await register(async_client, "alice")
    bob = await register(async_client, "bob")
    post = await create_post(async_client, alice)
    older = await _comment(async_client, bob, post["id"], "first")
    newer = await _comment(async_client, alice, post["id"], "second")

    base = datetime(2026, 5, 1, tzinfo=timezone.utc)
    for offset, comment in enumerate((older, newer)):
        await db_session.execute(
            update(Comment)
            .where(Comment.id == comment["id"])
            .values(created_at=base + timedelta(minutes=offset))
        )
    await db_session.commit()

    as_bob = await async_client.get(f"/api/v1/posts/{post['id']}/comments", headers=auth(bob))
    anonymous = await async_client.get(f"/api/v1/posts/{post['id']}/comments")

    comments = as_bob.json()["data"]["comments"]
    assert [(c["id"], c["isMine"]) for c in comments] == [
        (newer["id"], False),
        (older["id"], True),
    ]
    assert not any(c["isMine"] for c in anonymous.json()["data"]["comments"])


@pytest.mark.asyncio
async def test_list_comments_defaults_to_ten_per_page(async_client: AsyncClient):
    alice = await register(async_client, "alice")
    post = await create_post(async_client, alice)
    for index in range(12):
        await _comment(async_client, alice, post["id"], f"comment {index}")

    first = await async_client.get(f"/api/v1/posts/{post['id']}/comments")
    second = await async_client.get(
        f"/api/v1/posts/{post['id']}/comments", params={"page": 2}
    )

    assert len(first.json()["data"]["comments"]) == 10
    assert first.json()["data"]["pagination"] == {
        "page": 1,
        "limit": 10,
        "total": 12,
        "totalPages": 2,
    }
    assert len(second.json()["data"]["comments"]) == 2


@pytest.mark.asyncio
async def test_delete_comment_by_author(async_client: AsyncClient, db_session: AsyncSession):
    alice = await register(async_client, "alice")
    bob = await register(async_client, "bob")
    post = await create_post(async_client, alice)
    keep = await _comment(async_client, alice, post["id"], "keep")
    drop = await _comment(async_client, bob, post["id"], "drop")

    response = await async_client.delete(f"/api/v1/comments/{drop['id']}", headers=auth(bob))

    assert response.status_code == 200
    assert response.json()["message"] == "Comment deleted"
    assert await _stored_comment_count(db_session, post["id"]) == 1
    listed = await async_client.get(f"/api/v1/posts/{post['id']}/comments")
    assert [c["id"] for c in listed.json()["data"]["comments"]] == [keep["id"]]


@pytest.mark.asyncio
async def test_delete_comment_by_other_user_is_forbidden(
    async_client: AsyncClient, db_session: AsyncSession
):
    alice = await register(async_client, "alice")
    bob = await register(async_client, "bob")
    post = await create_post(async_client, alice)
    comment = await _comment(async_client, bob, post["id"], "mine")

    response = await async_client.delete(
        f"/api/v1/comments/{comment['id']}", headers=auth(alice)
    )

    assert response.status_code == 403
    assert response.json()["message"] == "You can only delete your own comments"
    assert await _stored_comment_count(db_session, post["id"]) == 1


@pytest.mark.asyncio
async def test_delete_missing_comment_returns_404(async_client: AsyncClient):
    alice = await register(async_client, "alice")

    response = await async_client.delete("/api/v1/comments/777", headers=auth(alice))

    assert response.status_code == 404
    assert response.json()["message"] == "Comment not found"


@pytest.mark.asyncio
async def test_comment_count_repairs_drift(
    async_client: AsyncClient, db_session: AsyncSession
):
    alice = await register(async_client, "alice")
    post = await create_post(async_client, alice)
    await db_session.execute(
        update(Post).where(Post.id == post["id"]).values(comment_count=42)
    )
    await db_session.commit()

    await _comment(async_client, alice, post["id"], "recount")

    db_session.expire_all()
    assert await _stored_comment_count(db_session, post["id"]) == 1


@pytest_asyncio.fixture()
async def locked_comment_count(db_session: AsyncSession):
    """Make every write to ``posts.comment_count`` fail at the database."""
    await db_session.execute(
        text(
            "CREATE TRIGGER lock_comment_count BEFORE UPDATE OF comment_count ON posts "
            "BEGIN SELECT RAISE(ABORT, 'comment_count is locked'); END"
        )
    )
    await db_session.commit()
    yield
    await db_session.execute(text("DROP TRIGGER IF EXISTS lock_comment_count"))
    await db_session.commit()


@pytest.mark.asyncio
async def test_comment_writes_survive_counter_failure(
    async_client: AsyncClient,
    db_session: AsyncSession,
    locked_comment_count,
    caplog: pytest.LogCaptureFixture,
):
    alice = await register(async_client, "alice")
    post = await create_post(async_client, alice)

    with caplog.at_level(logging.WARNING, logger=counters.__name__):
        created = await async_client.post(
            f"/api/v1/posts/{post['id']}/comments",
            json={"text": "still saved"},
            headers=auth(alice),
        )

    assert created.status_code == 201
    assert "Failed to sync comment count" in caplog.text
    result = await db_session.execute(
        select(func.count()).select_from(Comment).where(Comment.post_id == post["id"])
    )
    assert result.scalar_one() == 1
    assert await _stored_comment_count(db_session, post["id"]) == 0

    deleted = await async_client.delete(
        f"/api/v1/comments/{created.json()['data']['id']}", headers=auth(alice)
    )

    assert deleted.status_code == 200
    result = await db_session.execute(
        select(func.count()).select_from(Comment).where(Comment.post_id == post["id"])
    )
    assert result.scalar_one() == 0
