"""Authentication endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_db
from services import identity
from services.auth import clear_access_cookie, set_access_cookie

from .envelope import CamelModel, Envelope, ok
from .user_views import AccountView

router = APIRouter(prefix="/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    name: str = Field(min_length=2, max_length=80)
    username: str = Field(min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    phone: str | None = Field(default=None, max_length=32)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        normalized = value.strip()
        if len(normalized) < 2:
            raise ValueError("Name must be at least 2 characters")
        return normalized

    @field_validator("username")
    @classmethod
    def _reject_email_like_username(cls, value: str) -> str:
        normalized = value.strip()
        if "@" in normalized:
            raise ValueError("Username cannot contain '@'")
        return normalized


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class AuthView(CamelModel):
    token: str
    user: AccountView


def _auth_response(response: Response, user) -> AuthView:
    token = identity.issue_access_token(user)
    set_access_cookie(response, token)
    return AuthView(token=token, user=AccountView.model_validate(user))


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[AuthView],
)
async def register(
    payload: RegisterRequest,
    response: Response,
    session: AsyncSession = Depends(get_db),
) -> Envelope[AuthView]:
    user = await identity.register_user(
        session,
        name=payload.name,
        username=payload.username,
        email=str(payload.email),
        password=payload.password,
        phone=payload.phone,
    )
    return ok(_auth_response(response, user), "User registered successfully")


@router.post("/login", response_model=Envelope[AuthView])
async def login(
    payload: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_db),
) -> Envelope[AuthView]:
    user = await identity.authenticate_user(
        session,
        email=str(payload.email),
        password=payload.password,
    )
    return ok(_auth_response(response, user), "Login successful")


@router.post("/logout", response_model=Envelope[None])
async def logout(response: Response) -> Envelope[None]:
    clear_access_cookie(response)
    return ok(None, "Logged out")
