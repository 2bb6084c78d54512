"""Password reset via emailed one-time codes and short-lived reset tokens."""

from __future__ import annotations

import hashlib
import secrets

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from src.core.auth import TokenError, create_reset_token, decode_reset_token
from src.core.config import get_settings
from src.domain.services.auth_service import AuthService, UserNotFoundError
from src.domain.services.notifications import EmailSendResult, EmailService
from src.infrastructure.otp_store import OtpStore

logger = structlog.get_logger()


class InvalidOtpError(Exception):
    """Raised when an OTP is unknown, expired or does not match."""


class InvalidResetTokenError(Exception):
    """Raised when a reset token is invalid, expired or for another account."""


def generate_otp() -> str:
    """Six-digit numeric code, never starting with zero."""
    return str(100000 + secrets.randbelow(900000))


def password_fingerprint(hashed_password: str | None) -> str:
    """Short digest of the stored password hash, empty-hash safe for Google-only accounts."""
    return hashlib.sha256((hashed_password or "").encode()).hexdigest()[:16]


class PasswordResetService:
    def __init__(
        self,
        session: AsyncSession,
        otp_store: OtpStore,
        email_service: EmailService,
    ) -> None:
        self.auth = AuthService(session)
        self.otp_store = otp_store
        self.email_service = email_service
        self.settings = get_settings()

    async def request_reset(self, email: str) -> EmailSendResult:
        """Store a fresh OTP for ``email`` and send it out."""
        user = await self.auth.find_by_email(email)
        if user is None:
            raise UserNotFoundError("User not found")

        otp = generate_otp()
        await self.otp_store.save(user.email, otp, self.settings.otp_ttl_seconds)
        result = await self.email_service.send_verification_email(user.email, otp)
        await logger.ainfo("password_reset_requested", user_id=user.id, email_sent=result.success)
        return result

    async def verify_otp(self, email: str, otp: str) -> str:
        """Consume a matching OTP and return a reset token."""
        stored = await self.otp_store.get(email)
        if stored is None or not secrets.compare_digest(stored, otp):
            await logger.awarning("otp_verification_failed", email=email)
            raise InvalidOtpError("Invalid or expired OTP")

        await self.otp_store.delete(email)
        user = await self.auth.find_by_email(email)
        if user is None:
            raise UserNotFoundError("User not found")
        return create_reset_token(
            user.email, password_fingerprint=password_fingerprint(user.hashed_password)
        )

    async def reset_password(self, *, email: str, password: str, token: str) -> None:
        try:
            claims = decode_reset_token(token, email=email.lower())
        except TokenError as exc:
            raise InvalidResetTokenError(str(exc)) from exc

        user = await self.auth.find_by_email(email)
        if user is None:
            raise UserNotFoundError("User not found")
        if not secrets.compare_digest(
            str(claims.get("pwd", "")), password_fingerprint(user.hashed_password)
        ):
            await logger.awarning("reset_token_reused", user_id=user.id)
            raise InvalidResetTokenError("Reset token has already been used")

        await self.auth.set_password(email=email, password=password)
