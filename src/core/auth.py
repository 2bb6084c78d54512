from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt
from src.core.config import get_settings

RESET_TOKEN_TYPE = "reset"


class TokenError(Exception):
    """Raised when a token cannot be decoded or validated."""


class Role(str, Enum):
    CAR_OWNER = "car_owner"
    SERVICE_CENTER = "service_center"
    PART_SELLER = "part_seller"

    @classmethod
    def contains(cls, value: str) -> bool:
        return value in {role.value for role in cls}

    @classmethod
    def business_roles(cls) -> tuple[Role, ...]:
        return (cls.SERVICE_CENTER, cls.PART_SELLER)


def create_access_token(
    subject: str,
    *,
    roles: Sequence[str],
    email: str | None = None,
    setup_claims: dict[str, bool] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Generate a signed JWT access token.

    ``setup_claims`` carries the onboarding flags so clients can gate
    navigation without another round trip.
    """
    settings = get_settings()

    invalid_roles = [role for role in roles if role not in settings.allowed_roles]
    if invalid_roles:
        joined_roles = ", ".join(invalid_roles)
        raise TokenError(f"Unsupported role(s): {joined_roles}")

    now = datetime.now(UTC)
    ttl = expires_delta or timedelta(seconds=settings.access_token_ttl_seconds)
    payload: dict = {
        "sub": subject,
        "roles": list(roles),
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
        "iss": settings.app_name,
    }

    if email:
        payload["email"] = email
    if setup_claims:
        payload.update(setup_claims)

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Decode and validate a JWT access token."""
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "roles", "exp"]},
        )
    except jwt.PyJWTError as exc:  # pragma: no cover - third-party raises numerous subclasses
        raise TokenError("Invalid token") from exc

    if payload.get("type") == RESET_TOKEN_TYPE:
        raise TokenError("Reset tokens cannot be used for authentication")

    _ensure_roles(payload.get("roles", []))
    return payload


def create_reset_token(
    email: str,
    *,
    password_fingerprint: str = "",
    expires_delta: timedelta | None = None,
) -> str:
    """Generate a short-lived token authorising a password reset for ``email``.

    ``password_fingerprint`` ties the token to the password it replaces, so the
    token stops working once that password has changed.
    """
    settings = get_settings()
    now = datetime.now(UTC)
    ttl = expires_delta or timedelta(seconds=settings.reset_token_ttl_seconds)
    payload = {
        "sub": email,
        "type": RESET_TOKEN_TYPE,
        "pwd": password_fingerprint,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
        "iss": settings.app_name,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_reset_token(token: str, *, email: str) -> dict:
    """Validate a reset token and check that it was issued for ``email``."""
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "type", "exp"]},
        )
    except jwt.PyJWTError as exc:
        raise TokenError("Invalid or expired token") from exc

    if payload.get("type") != RESET_TOKEN_TYPE or payload.get("sub") != email:
        raise TokenError("Invalid token")
    return payload


def _ensure_roles(roles: Iterable[str]) -> None:
    for role in roles:
        if not Role.contains(role):
            raise TokenError(f"Unsupported role: {role}")
