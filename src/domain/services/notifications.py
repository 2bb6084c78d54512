"""
Transactional email dispatch: template rendering plus one Resend call.

Sends are best-effort. A transport failure is logged and reported through
``EmailSendResult`` so callers can decide whether it matters; nothing is
retried or queued.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import structlog
from src.core.config import get_settings
from src.domain.email_templates import render_template
from src.domain.validation import validate_email
from src.libs.resend_client import ResendClient, ResendClientError

logger = structlog.get_logger(__name__)


class EmailDispatchError(Exception):
    """Raised when an email request is malformed before any send is attempted."""


@dataclass(slots=True)
class EmailSendResult:
    success: bool
    message_id: str | None = None
    error: str | None = None


@dataclass(slots=True)
class BulkEmailResult:
    success: bool
    results: list[dict[str, Any]] = field(default_factory=list)


@dataclass(slots=True)
class LoginDetails:
    timestamp: datetime
    ip: str = "unknown"
    device: str = "unknown"
    location: str = "unknown"


class EmailService:
    """Renders and sends the platform's transactional emails."""

    def __init__(self, client: ResendClient | None = None) -> None:
        self.client = client or ResendClient()
        self.settings = get_settings()

    def _common_links(self) -> dict[str, str]:
        return {
            "support_email": self.settings.support_email,
            "support_link": self.settings.support_link,
            "website_link": self.settings.website_link,
        }

    async def send_welcome_email(self, email: str, name: str | None = None) -> EmailSendResult:
        _require_valid(email)
        body = render_template(
            "welcome",
            {
                **self._common_links(),
                "name": name or email.split("@")[0],
                "onboarding_link": f"{self.settings.frontend_url}/setup/details",
            },
        )
        return await self.send_custom_email(email, "Welcome to MotorTrace!", body, is_html=True)

    async def send_login_notification_email(
        self, email: str, details: LoginDetails, name: str | None = None
    ) -> EmailSendResult:
        _require_valid(email)
        body = render_template(
            "login",
            {
                **self._common_links(),
                "name": name or email.split("@")[0],
                "timestamp": details.timestamp.strftime("%Y-%m-%d %H:%M:%S %Z").strip(),
                "location": details.location,
                "device": details.device,
                "ip": details.ip,
            },
        )
        return await self.send_custom_email(email, "New login to your account", body, is_html=True)

    async def send_notification_email(
        self,
        recipients: str | Sequence[str],
        title: str,
        message: str,
        *,
        subtitle: str | None = None,
        action_link: str | None = None,
        action_text: str | None = None,
        items: Sequence[Mapping[str, Any]] = (),
    ) -> EmailSendResult:
        """Send the generic notification layout.

        ``items`` render as ``label: value`` rows; the action button appears
        only when ``action_link`` is given.
        """
        body = render_template(
            "notification",
            {
                **self._common_links(),
                "title": title,
                "subtitle": subtitle,
                "message": message,
                "action_link": action_link,
                "action_text": action_text or "Open MotorTrace",
                "items": [dict(item) for item in items],
                "signature": "Best regards, The Team",
            },
        )
        return await self.send_custom_email(recipients, title, body, is_html=True)

    async def send_verification_email(self, email: str, otp: str) -> EmailSendResult:
        """Email a password-reset one-time code."""
        _require_valid(email)
        body = render_template(
            "reset",
            {
                **self._common_links(),
                "otp": otp,
                "expiry_minutes": self.settings.otp_ttl_seconds // 60,
            },
        )
        return await self.send_custom_email(email, "Password Reset Request", body, is_html=True)

    async def send_custom_email(
        self,
        to: str | Sequence[str],
        subject: str,
        body: str,
        *,
        is_html: bool = False,
    ) -> EmailSendResult:
        recipients = [to] if isinstance(to, str) else list(to)
        if not recipients:
            raise EmailDispatchError("At least one recipient is required")

        try:
            response = await self.client.send_email(
                from_email=self.settings.resend_from_email,
                to_emails=recipients,
                subject=subject,
                html=body if is_html else None,
                text=None if is_html else body,
            )
        except ResendClientError as exc:
            await logger.aerror(
                "email_send_failed",
                to=recipients,
                subject=subject,
                error=str(exc),
            )
            return EmailSendResult(success=False, error=str(exc))

        await logger.ainfo("email_sent", to=recipients, subject=subject, message_id=response.id)
        return EmailSendResult(success=True, message_id=response.id)

    async def send_bulk_custom_emails(self, emails: Sequence[dict[str, Any]]) -> BulkEmailResult:
        """Send individually addressed emails one after another."""
        results = []
        for email in emails:
            outcome = await self.send_custom_email(
                email["to"],
                email["subject"],
                email["body"],
                is_html=bool(email.get("is_html", False)),
            )
            results.append(
                {"email": email["to"], "success": outcome.success, "error": outcome.error}
            )

        return BulkEmailResult(
            success=all(item["success"] for item in results),
            results=results,
        )


def _require_valid(email: str) -> None:
    if not validate_email(email):
        raise EmailDispatchError("Invalid email address")
