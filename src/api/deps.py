from __future__ import annotations

import secrets
from collections.abc import AsyncIterator, Callable, Sequence
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from src.core.auth import Role, TokenError, create_access_token, decode_access_token
from src.core.config import get_settings
from src.domain import User
from src.domain.services.notifications import EmailService
from src.infrastructure.db.models import ServiceCenterProfile
from src.infrastructure.db.session import get_session
from src.infrastructure.otp_store import OtpStore, RedisOtpStore
from src.libs.google_oauth import GoogleOAuthClient, GoogleOAuthClientProtocol

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
) -> User:
    """Resolve the authenticated user from a bearer token."""
    if credentials is None:
        raise _unauthorized("Access token required")

    try:
        payload = decode_access_token(credentials.credentials)
    except TokenError as exc:
        raise _unauthorized(str(exc)) from exc

    subject = payload.get("sub")
    roles = payload.get("roles", [])

    if not subject or not str(subject).isdigit():
        raise _unauthorized("Token missing subject")

    if not roles:
        raise _forbidden("Token missing required roles")

    return User(
        user_id=int(subject),
        role=roles[0],
        email=payload.get("email", ""),
        is_registration_complete=bool(payload.get("is_registration_complete")),
        is_setup_complete=bool(payload.get("is_setup_complete")),
        has_active_subscription=bool(payload.get("has_active_subscription")),
    )


def require_roles(required_roles: Sequence[str]) -> Callable[[User], User]:
    """Dependency factory enforcing that the authenticated user has one of the required roles."""
    settings = get_settings()
    allowed = set(settings.allowed_roles)

    invalid_roles = [role for role in required_roles if role not in allowed]
    if invalid_roles:
        joined_roles = ", ".join(invalid_roles)
        raise ValueError(f"Unsupported role(s) requested: {joined_roles}")

    required = set(required_roles)

    def dependency(user: User = Depends(get_current_user)) -> User:  # noqa: B008
        if user.role not in required:
            raise _forbidden("Insufficient permissions")
        return user

    return dependency


def require_self(user_id: int, user: User) -> None:
    """Reject access to another account's resources."""
    if user.user_id != user_id:
        raise _forbidden("Unauthorized")


async def require_admin_key(
    x_admin_key: str | None = Header(default=None, alias="X-Admin-Key"),
) -> None:
    """Guard back-office endpoints with the shared ``ADMIN_API_KEY``."""
    expected = get_settings().admin_api_key
    if not expected or not x_admin_key or not secrets.compare_digest(x_admin_key, expected):
        raise _forbidden("Admin key required")


def issue_smoke_token(user_id: int, *, role: Role, email: str | None = None) -> str:
    """Generate a signed token for manual smoke testing."""
    return create_access_token(str(user_id), roles=[role.value], email=email)


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Provide an async SQLAlchemy session for API handlers."""
    async for session in get_session():
        yield session


async def get_service_center(
    center_id: int,
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> ServiceCenterProfile:
    center = await session.get(ServiceCenterProfile, center_id)
    if center is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Service center not found"
        )
    return center


async def get_owned_service_center(
    center: ServiceCenterProfile = Depends(get_service_center),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> ServiceCenterProfile:
    """Resolve ``center_id`` and require the caller to be the center's account."""
    if center.user_id != user.user_id:
        raise _forbidden("Only the service center owner can manage its catalog")
    return center


@lru_cache
def _otp_store() -> RedisOtpStore:
    return RedisOtpStore()


def get_otp_store() -> OtpStore:
    return _otp_store()


def get_email_service() -> EmailService:
    return EmailService()


@lru_cache
def _google_client() -> GoogleOAuthClient:
    return GoogleOAuthClient()


def get_google_client() -> GoogleOAuthClientProtocol:
    return _google_client()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
