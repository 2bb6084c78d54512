"""
Google OAuth client: consent redirect, code exchange and ID-token checks.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlencode

import httpx
import jwt
import structlog
from src.core.config import get_settings

logger = structlog.get_logger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_CERTS_URL = "https://www.googleapis.com/oauth2/v3/certs"
GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


class GoogleOAuthError(Exception):
    """Raised when Google rejects a code or an ID token fails verification."""


@dataclass(slots=True)
class GoogleIdentity:
    """Claims we use from a verified Google ID token."""

    email: str | None
    name: str | None
    subject: str
    email_verified: bool = False


class GoogleOAuthClientProtocol(Protocol):
    """Protocol for the Google client (allows mocking)."""

    def authorization_url(self, state: str = "") -> str: ...

    async def exchange_code(self, code: str) -> str: ...

    async def verify_id_token(self, id_token: str) -> GoogleIdentity: ...


class GoogleOAuthClient:
    """Async Google OAuth 2.0 / OpenID Connect client."""

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        redirect_uri: str | None = None,
        timeout_seconds: int | None = None,
        jwks_client: jwt.PyJWKClient | None = None,
    ) -> None:
        settings = get_settings()
        self.client_id = client_id or settings.google_client_id
        self.client_secret = client_secret or settings.google_client_secret
        self.redirect_uri = redirect_uri or settings.google_redirect_uri
        self.timeout = (
            timeout_seconds if timeout_seconds is not None else settings.google_timeout_seconds
        )
        self.jwks_client = jwks_client or jwt.PyJWKClient(GOOGLE_CERTS_URL)

        if not self.client_id:
            logger.warning("google_client_id_missing", msg="GOOGLE_CLIENT_ID not configured")

    def authorization_url(self, state: str = "") -> str:
        """Build the consent-screen URL; ``state`` round-trips to the callback."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": "openid email profile",
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> str:
        """Exchange an authorization code and return the ID token."""
        data = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(GOOGLE_TOKEN_URL, data=data)
        except httpx.HTTPError as exc:
            raise GoogleOAuthError(f"Token exchange failed: {exc}") from exc

        if response.status_code != 200:
            raise GoogleOAuthError(
                f"Token exchange rejected ({response.status_code}): {response.text[:200]}"
            )

        try:
            tokens = response.json()
        except ValueError as exc:
            raise GoogleOAuthError("Token response was not valid JSON") from exc

        id_token = tokens.get("id_token")
        if not id_token:
            raise GoogleOAuthError("No ID token received")
        return id_token

    async def verify_id_token(self, id_token: str) -> GoogleIdentity:
        """Verify signature, audience and issuer of a Google ID token."""
        try:
            # PyJWKClient fetches certificates synchronously
            signing_key = await asyncio.to_thread(
                self.jwks_client.get_signing_key_from_jwt, id_token
            )
            claims = jwt.decode(
                id_token,
                signing_key.key,
                algorithms=["RS256"],
                audience=self.client_id,
                options={"require": ["sub", "aud", "exp", "iss"]},
            )
        except jwt.PyJWTError as exc:
            raise GoogleOAuthError("Invalid google token") from exc

        if claims.get("iss") not in GOOGLE_ISSUERS:
            raise GoogleOAuthError("Invalid google token issuer")

        return GoogleIdentity(
            email=claims.get("email"),
            name=claims.get("name"),
            subject=claims["sub"],
            email_verified=bool(claims.get("email_verified", False)),
        )
