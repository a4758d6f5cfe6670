# src/lumina_stage/api/v1/endpoints/auth.py
"""Authentication endpoints for the Lumina API."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, HTTPException, status
from jose import jwt
from sqlalchemy import select

from lumina_stage.api.v1.dependencies import SessionDep
from lumina_stage.core.security import generate_salt, hash_password, verify_password
from lumina_stage.core.settings import settings
from lumina_stage.models import User
from lumina_stage.schemas.user import (
    PrivateUserResponse,
    SigninRequest,
    SignupRequest,
    TokenResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def create_access_token(subject: int | str, extra_claims: dict[str, str] | None = None) -> str:
    """Create JWT access token for user authentication."""
    to_encode: dict[str, object] = {"sub": str(subject)}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


@router.post(
    "/signup",
    summary="Create an account",
    response_model=PrivateUserResponse,
    status_code=status.HTTP_201_CREATED,
)
async def signup(payload: SignupRequest, db: SessionDep) -> User:
    """Register a new account with an email and password.

    Raises:
        HTTPException: 409 if the email is already registered
    """
    existing = db.scalar(select(User).where(User.email == payload.email))
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered",
        )

    salt = generate_salt()
    user = User(
        full_name=payload.full_name,
        email=payload.email,
        password_salt=salt,
        password_hash=hash_password(payload.password, salt),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


@router.post(
    "/signin",
    summary="Exchange credentials for an access token",
    response_model=TokenResponse,
)
async def signin(payload: SigninRequest, db: SessionDep) -> TokenResponse:
    """Verify credentials and issue a bearer token.

    Raises:
        HTTPException: 401 for unknown email or wrong password, 403 for
            banned or suspended accounts
    """
    user = db.scalar(select(User).where(User.email == payload.email))
    if user is None or not verify_password(payload.password, user.password_salt, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is suspended or banned",
        )
    return TokenResponse(access_token=create_access_token(user.id))
