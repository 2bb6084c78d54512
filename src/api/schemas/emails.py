from __future__ import annotations

from pydantic import BaseModel, Field


class WelcomeEmailRequest(BaseModel):
    email: str
    username: str = Field(..., min_length=1)


class NotificationItem(BaseModel):
    label: str
    value: str


class NotificationEmailRequest(BaseModel):
    email: str
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    subtitle: str | None = None
    action_link: str | None = None
    action_text: str | None = None
    items: list[NotificationItem] = Field(default_factory=list)


class VerifyEmailRequest(BaseModel):
    email: str
    otp: str = Field(..., min_length=1)


class TestEmailRequest(BaseModel):
    email: str


class CustomEmail(BaseModel):
    to: str
    subject: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    is_html: bool = False


class BulkEmailRequest(BaseModel):
    emails: list[CustomEmail] = Field(..., min_length=1, max_length=100)


class BulkEmailStatus(BaseModel):
    email: str
    success: bool
    error: str | None = None


class BulkEmailResponse(BaseModel):
    success: bool
    results: list[BulkEmailStatus]
