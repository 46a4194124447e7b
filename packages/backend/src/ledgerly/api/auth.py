"""Auth API — registration, login, token refresh.

- POST /auth/register → create a new user account
- POST /auth/login → email/password → JWT tokens
- POST /auth/refresh → refresh token → new token pair
- GET /auth/me → current user info (requires a valid access token)
"""

import uuid
from datetime import datetime

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerly.auth.dependencies import CurrentIdentity, get_current_user
from ledgerly.auth.jwt import (
    TokenError,
    create_access_token,
    create_refresh_token,
    token_subject,
    verify_token,
)
from ledgerly.auth.password import hash_password, verify_password
from ledgerly.db.engine import get_db
from ledgerly.db.models import User
from ledgerly.errors import Conflict, InvalidCredential, NotFound

router = APIRouter(prefix="/auth")

logger = structlog.get_logger()


# ─── Schemas ─────────────────────────────────────────────


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(min_length=8)


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    refresh_token: str


class UserRead(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    created_at: datetime

    model_config = {"from_attributes": True}


def _token_pair(user_id: str) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user_id),
        refresh_token=create_refresh_token(user_id),
    )


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=UserRead, status_code=201)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create a new user account."""
    email = body.email.strip().lower()
    q = select(User).where(User.email == email)
    result = await db.execute(q)
    if result.scalars().first():
        raise Conflict("Email already registered")

    user = User(
        email=email,
        name=body.name,
        password_hash=hash_password(body.password),
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        await db.rollback()
        raise Conflict("Email already registered")
    await db.refresh(user)
    logger.info("auth.registered", user_id=str(user.id))
    return user


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Login with email and password → JWT tokens."""
    q = select(User).where(User.email == body.email.strip().lower())
    result = await db.execute(q)
    user = result.scalars().first()

    if not user or not verify_password(body.password, user.password_hash):
        logger.info("auth.login_failed")
        raise InvalidCredential("Invalid credentials")

    return _token_pair(str(user.id))


# ─── Refresh ────────────────────────────────────────────


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest):
    """Exchange a refresh token for a new token pair."""
    try:
        payload = verify_token(body.refresh_token)
        if payload.get("type") != "refresh":
            raise InvalidCredential("Not a refresh token")
        return _token_pair(token_subject(payload))
    except TokenError as e:
        raise InvalidCredential(str(e))


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get the current authenticated user's info."""
    user = await db.get(User, identity.user_id)
    if not user:
        raise NotFound("User not found")
    return user
