"""Shared library helpers."""

from src.libs.google_oauth import (
    GoogleIdentity,
    GoogleOAuthClient,
    GoogleOAuthClientProtocol,
    GoogleOAuthError,
)
from src.libs.resend_client import (
    ResendAPIError,
    ResendClient,
    ResendClientError,
    ResendEmailResponse,
)

__all__ = [
    "GoogleIdentity",
    "GoogleOAuthClient",
    "GoogleOAuthClientProtocol",
    "GoogleOAuthError",
    "ResendAPIError",
    "ResendClient",
    "ResendClientError",
    "ResendEmailResponse",
]
