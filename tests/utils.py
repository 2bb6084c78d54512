from __future__ import annotations

from typing import Any

from httpx import AsyncClient
from src.api.deps import issue_smoke_token
from src.core.auth import Role
from src.libs.google_oauth import GoogleIdentity, GoogleOAuthError
from src.libs.resend_client import ResendAPIError, ResendEmailResponse

ADMIN_KEY = "test-admin-key"
DEFAULT_PASSWORD = "password123"


def auth_headers(user_id: int, role: Role = Role.CAR_OWNER) -> dict[str, str]:
    token = issue_smoke_token(user_id, role=role, email=f"user{user_id}@example.com")
    return {"Authorization": f"Bearer {token}"}


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class FakeOtpStore:
    """In-memory stand-in for the Redis OTP store."""

    def __init__(self) -> None:
        self.codes: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def save(self, email: str, otp: str, ttl_seconds: int) -> None:
        self.codes[email.lower()] = otp
        self.ttls[email.lower()] = ttl_seconds

    async def get(self, email: str) -> str | None:
        return self.codes.get(email.lower())

    async def delete(self, email: str) -> None:
        self.codes.pop(email.lower(), None)


class FakeResendClient:
    """Records outgoing emails; set ``fail`` to simulate a provider error."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.fail = False

    async def send_email(
        self,
        *,
        from_email: str,
        to_emails: list[str],
        subject: str,
        html: str | None = None,
        text: str | None = None,
    ) -> ResendEmailResponse:
        if self.fail:
            raise ResendAPIError("Resend error 500: upstream failure", status_code=500)
        self.sent.append(
            {"from": from_email, "to": to_emails, "subject": subject, "html": html, "text": text}
        )
        return ResendEmailResponse(id=f"email-{len(self.sent)}")

    def subjects_for(self, email: str) -> list[str]:
        return [message["subject"] for message in self.sent if email in message["to"]]


class FakeGoogleClient:
    """Maps ID tokens (and ``code-<token>`` codes) to identities."""

    def __init__(self) -> None:
        self.identities: dict[str, GoogleIdentity] = {}

    def add(
        self,
        token: str,
        email: str | None,
        name: str | None = "Google User",
        *,
        email_verified: bool = True,
    ) -> None:
        self.identities[token] = GoogleIdentity(
            email=email, name=name, subject=f"google-{token}", email_verified=email_verified
        )

    def authorization_url(self, state: str = "") -> str:
        return f"https://accounts.google.com/o/oauth2/v2/auth?state={state}"

    async def exchange_code(self, code: str) -> str:
        if not code.startswith("code-"):
            raise GoogleOAuthError("Token exchange rejected (400)")
        return code.removeprefix("code-")

    async def verify_id_token(self, id_token: str) -> GoogleIdentity:
        identity = self.identities.get(id_token)
        if identity is None:
            raise GoogleOAuthError("Invalid google token")
        return identity


def vehicle_payload(plate: str = "ABC-1234", **overrides: Any) -> dict[str, Any]:
    payload = {
        "vehicle_name": "Corolla",
        "model": "Toyota",
        "year": 2020,
        "license_plate": plate,
        "color": "blue",
        "vehicle_type": "car",
    }
    payload.update(overrides)
    return payload


def business_details() -> dict[str, Any]:
    return {
        "business_name": "Speedy Motors",
        "address": "12 Main Street",
        "business_registration_number": "BR-0001",
        "services_offered": ["Maintenance", "Brakes"],
        "operating_hours": {"mon": "08:00-17:00"},
    }


def shop_details() -> dict[str, Any]:
    return {
        "shop_name": "Parts Hub",
        "address": "4 Market Road",
        "categories_sold": ["engine", "brakes"],
        "inventory_capacity": "500",
        "contact_person_name": "Sam Perera",
    }


async def register(
    client: AsyncClient,
    email: str = "owner@example.com",
    *,
    headers: dict[str, str] | None = None,
    **fields: Any,
) -> dict[str, Any]:
    payload = {"email": email, "password": DEFAULT_PASSWORD, **fields}
    response = await client.post("/auth/register", json=payload, headers=headers or {})
    assert response.status_code == 201, response.text
    return response.json()


async def register_car_owner(
    client: AsyncClient, email: str = "owner@example.com", plate: str = "ABC-1234"
) -> dict[str, Any]:
    """Register through the mobile flow and finish setup with one vehicle."""
    registered = await register(client, email, headers={"X-Client-Type": "mobile"})
    response = await client.post(
        "/auth/setup/details",
        json={
            "phone": "0771234567",
            "role": "car_owner",
            "profile_data": {"vehicles": [vehicle_payload(plate)]},
        },
        headers=bearer(registered["token"]),
    )
    assert response.status_code == 200, response.text
    return response.json()


async def register_service_center(
    client: AsyncClient, email: str = "center@example.com"
) -> dict[str, Any]:
    return await register(
        client,
        email,
        name="Speedy Motors",
        phone="0112345678",
        role="service_center",
        profile_data={"business_details": business_details()},
    )
