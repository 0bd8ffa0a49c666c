"""Shared request helpers for API tests."""

from io import BytesIO
from uuid import uuid4

from httpx import AsyncClient
from PIL import Image


def make_image_bytes(size: tuple[int, int] = (640, 480), fmt: str = "PNG") -> bytes:
    image = Image.new("RGB", size, color=(0, 200, 100))
    buffer = BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def make_user_payload(prefix: str) -> dict[str, str]:
    suffix = uuid4().hex[:6]
    return {
        "name": f"{prefix.title()} Tester",
        "username": f"{prefix}_{suffix}",
        "email": f"{prefix}_{suffix}@example.com",
        "password": "Sup3rSecret!",
    }


async def register(client: AsyncClient, prefix: str) -> dict[str, str]:
    """Register a user and return the payload plus ``token`` and ``id``."""
    payload = make_user_payload(prefix)
    response = await client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    client.cookies.clear()
    return {**payload, "token": data["token"], "id": data["user"]["id"]}


def auth(user: dict[str, str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {user['token']}"}


async def create_post(
    client: AsyncClient,
    user: dict[str, str],
    caption: str | None = "hello",
) -> dict:
    files = {"image": ("photo.png", make_image_bytes(), "image/png")}
    data = {"caption": caption} if caption is not None else {}
    response = await client.post(
        "/api/v1/posts",
        files=files,
        data=data,
        headers=auth(user),
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]
