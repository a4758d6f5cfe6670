"""Shared API dependencies for authentication and common functionality."""

from datetime import datetime
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from lumina_stage.core.settings import settings
from lumina_stage.db.session import get_db
from lumina_stage.models import User
from lumina_stage.services.ai import AIClient, get_ai_client
from lumina_stage.services.blogs import cooldown_remaining
from lumina_stage.services.moderation import ModerationService

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _user_from_token(token: str, db: Session) -> User:
    """Resolve the account referenced by a bearer token.

    Args:
        token: Encoded JWT
        db: Database session

    Returns:
        User object for the token's subject

    Raises:
        HTTPException: 401 if the token is invalid or the user is gone, 403 if
            the account is banned or suspended
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )

    user = db.get(User, int(subject))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is suspended or banned",
        )
    return user


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from JWT token."""
    return _user_from_token(credentials.credentials, db)


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_bearer_scheme)],
    db: SessionDep,
) -> User | None:
    """Return the authenticated user, or None for anonymous callers.

    A token that is present but invalid is still rejected.
    """
    if credentials is None:
        return None
    return _user_from_token(credentials.credentials, db)


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]


def get_admin_user(user: CurrentUserDep) -> User:
    """Require an administrator account."""
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


AdminUserDep = Annotated[User, Depends(get_admin_user)]


def get_ai_client_dep() -> AIClient:
    """Return the shared AI client."""
    return get_ai_client()


AIClientDep = Annotated[AIClient, Depends(get_ai_client_dep)]


def get_moderation_service(ai_client: AIClientDep) -> ModerationService:
    """Return a moderation service bound to the shared AI client."""
    return ModerationService(ai_client=ai_client)


ModerationDep = Annotated[ModerationService, Depends(get_moderation_service)]


def enforce_cooldown(user: User, last: datetime | None, seconds: int, action: str) -> None:
    """Raise 429 while ``user`` is still inside the cooldown for ``action``.

    Administrators are exempt.
    """
    if user.is_admin:
        return
    remaining = cooldown_remaining(last, seconds)
    if remaining:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Please wait {remaining} seconds before {action} again.",
        )


async def ensure_allowed(
    moderation: ModerationService,
    db: Session,
    text: str,
    user: User,
    request: Request | None = None,
) -> None:
    """Run moderation on ``text``; log and reject with 400 when it is unsafe."""
    result = await moderation.moderate(text)
    if result.safe:
        return
    ip_address = request.client.host if request is not None and request.client else None
    moderation.record_rejection(db, text, result, user_id=user.id, ip_address=ip_address)
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"Content rejected: {result.reason}",
    )
