"""Back-office email triggers, guarded by the admin key."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from src.api.deps import get_email_service, require_admin_key
from src.api.schemas.auth import MessageResponse
from src.api.schemas.emails import (
    BulkEmailRequest,
    BulkEmailResponse,
    NotificationEmailRequest,
    TestEmailRequest,
    VerifyEmailRequest,
    WelcomeEmailRequest,
)
from src.domain.services.notifications import EmailDispatchError, EmailSendResult, EmailService
from src.domain.validation import validate_email

router = APIRouter(prefix="/auth", tags=["Email"], dependencies=[Depends(require_admin_key)])
logger = structlog.get_logger()

TEST_EMAIL_BODY = "<h1>Test Email</h1><p>This is a test email from your application.</p>"


def _require_email(email: str) -> None:
    if not validate_email(email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email address")


def _sent(result: EmailSendResult, kind: str) -> MessageResponse:
    if not result.success:
        logger.warning("email_endpoint_failed", kind=kind, error=result.error)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Error sending {kind} email: {result.error}",
        )
    return MessageResponse(message=f"{kind.capitalize()} email sent successfully")


@router.post("/welcome-email", response_model=MessageResponse)
async def send_welcome_email(
    payload: WelcomeEmailRequest,
    email_service: EmailService = Depends(get_email_service),
) -> MessageResponse:
    _require_email(payload.email)
    try:
        result = await email_service.send_welcome_email(payload.email, payload.username)
    except EmailDispatchError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _sent(result, "welcome")


@router.post("/notification-email", response_model=MessageResponse)
async def send_notification_email(
    payload: NotificationEmailRequest,
    email_service: EmailService = Depends(get_email_service),
) -> MessageResponse:
    _require_email(payload.email)
    try:
        result = await email_service.send_notification_email(
            payload.email,
            payload.title,
            payload.message,
            subtitle=payload.subtitle,
            action_link=payload.action_link,
            action_text=payload.action_text,
            items=[item.model_dump() for item in payload.items],
        )
    except EmailDispatchError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _sent(result, "notification")


@router.post("/verify-email", response_model=MessageResponse)
async def send_verification_email(
    payload: VerifyEmailRequest,
    email_service: EmailService = Depends(get_email_service),
) -> MessageResponse:
    _require_email(payload.email)
    try:
        result = await email_service.send_verification_email(payload.email, payload.otp)
    except EmailDispatchError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _sent(result, "verification")


@router.post("/test-email", response_model=MessageResponse)
async def send_test_email(
    payload: TestEmailRequest,
    email_service: EmailService = Depends(get_email_service),
) -> MessageResponse:
    _require_email(payload.email)
    try:
        result = await email_service.send_custom_email(
            payload.email, "Test Email", TEST_EMAIL_BODY, is_html=True
        )
    except EmailDispatchError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _sent(result, "test")


@router.post("/bulk-email", response_model=BulkEmailResponse)
async def send_bulk_email(
    payload: BulkEmailRequest,
    email_service: EmailService = Depends(get_email_service),
) -> BulkEmailResponse:
    """Send individually addressed emails; one failed send does not stop the rest."""
    for email in payload.emails:
        _require_email(email.to)

    result = await email_service.send_bulk_custom_emails(
        [email.model_dump() for email in payload.emails]
    )
    if not result.success:
        logger.warning(
            "bulk_email_partial_failure",
            failed=sum(1 for item in result.results if not item["success"]),
        )
    return BulkEmailResponse(success=result.success, results=result.results)
