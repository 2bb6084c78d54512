"""Integration tests for the OTP password reset flow."""

from __future__ import annotations

import pytest
from fastapi import status
from httpx import AsyncClient
from src.core.auth import create_reset_token
from src.core.config import get_settings
from src.domain.services.password_reset import password_fingerprint

from tests.utils import FakeOtpStore, FakeResendClient, register


async def _request_otp(client: AsyncClient, otp_store: FakeOtpStore, email: str) -> str:
    response = await client.post("/auth/forgot-password", json={"email": email})
    assert response.status_code == status.HTTP_200_OK, response.text
    return otp_store.codes[email]


class TestPasswordReset:
    @pytest.mark.asyncio
    async def test_full_reset_flow(
        self,
        async_client: AsyncClient,
        otp_store: FakeOtpStore,
        resend: FakeResendClient,
    ) -> None:
        await register(async_client, "reset@example.com")

        otp = await _request_otp(async_client, otp_store, "reset@example.com")
        assert len(otp) == 6
        assert otp_store.ttls["reset@example.com"] == get_settings().otp_ttl_seconds
        assert otp in resend.sent[-1]["html"]

        verified = await async_client.post(
            "/auth/verify-otp", json={"email": "reset@example.com", "otp": otp}
        )
        assert verified.status_code == status.HTTP_200_OK
        reset_token = verified.json()["reset_token"]

        reset = await async_client.post(
            "/auth/reset-password",
            json={"email": "reset@example.com", "password": "new-password-1", "token": reset_token},
        )
        assert reset.status_code == status.HTTP_200_OK
        assert reset.json()["message"] == "Password reset successfully"

        old_login = await async_client.post(
            "/auth/login", json={"email": "reset@example.com", "password": "password123"}
        )
        new_login = await async_client.post(
            "/auth/login", json={"email": "reset@example.com", "password": "new-password-1"}
        )
        assert old_login.status_code == status.HTTP_401_UNAUTHORIZED
        assert new_login.status_code == status.HTTP_200_OK

    @pytest.mark.asyncio
    async def test_unknown_email(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/auth/forgot-password", json={"email": "nobody@example.com"}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "User not found"

    @pytest.mark.asyncio
    async def test_email_failure_is_reported(
        self, async_client: AsyncClient, resend: FakeResendClient
    ) -> None:
        await register(async_client, "reset@example.com")
        resend.fail = True

        response = await async_client.post(
            "/auth/forgot-password", json={"email": "reset@example.com"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_otp_is_single_use(
        self, async_client: AsyncClient, otp_store: FakeOtpStore
    ) -> None:
        await register(async_client, "reset@example.com")
        otp = await _request_otp(async_client, otp_store, "reset@example.com")
        payload = {"email": "reset@example.com", "otp": otp}

        first = await async_client.post("/auth/verify-otp", json=payload)
        second = await async_client.post("/auth/verify-otp", json=payload)

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_400_BAD_REQUEST
        assert second.json()["detail"] == "Invalid or expired OTP"

    @pytest.mark.asyncio
    async def test_wrong_otp(self, async_client: AsyncClient, otp_store: FakeOtpStore) -> None:
        await register(async_client, "reset@example.com")
        otp = await _request_otp(async_client, otp_store, "reset@example.com")
        wrong = "111111" if otp != "111111" else "222222"

        response = await async_client.post(
            "/auth/verify-otp", json={"email": "reset@example.com", "otp": wrong}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert otp_store.codes["reset@example.com"] == otp

    @pytest.mark.asyncio
    async def test_reset_token_for_another_email_is_rejected(
        self, async_client: AsyncClient
    ) -> None:
        await register(async_client, "victim@example.com")

        response = await async_client.post(
            "/auth/reset-password",
            json={
                "email": "victim@example.com",
                "password": "new-password-1",
                "token": create_reset_token("attacker@example.com"),
            },
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_reset_for_deleted_account(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/auth/reset-password",
            json={
                "email": "ghost@example.com",
                "password": "new-password-1",
                "token": create_reset_token("ghost@example.com"),
            },
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_reset_token_is_single_use(
        self, async_client: AsyncClient, otp_store: FakeOtpStore
    ) -> None:
        await register(async_client, "reset@example.com")
        otp = await _request_otp(async_client, otp_store, "reset@example.com")
        verified = await async_client.post(
            "/auth/verify-otp", json={"email": "reset@example.com", "otp": otp}
        )
        reset_token = verified.json()["reset_token"]

        first = await async_client.post(
            "/auth/reset-password",
            json={"email": "reset@example.com", "password": "new-password-1", "token": reset_token},
        )
        replay = await async_client.post(
            "/auth/reset-password",
            json={"email": "reset@example.com", "password": "new-password-2", "token": reset_token},
        )

        assert first.status_code == status.HTTP_200_OK
        assert replay.status_code == status.HTTP_400_BAD_REQUEST
        assert replay.json()["detail"] == "Reset token has already been used"
        login = await async_client.post(
            "/auth/login", json={"email": "reset@example.com", "password": "new-password-1"}
        )
        assert login.status_code == status.HTTP_200_OK

    @pytest.mark.asyncio
    async def test_token_issued_for_an_older_password_is_rejected(
        self, async_client: AsyncClient
    ) -> None:
        await register(async_client, "reset@example.com")

        response = await async_client.post(
            "/auth/reset-password",
            json={
                "email": "reset@example.com",
                "password": "new-password-1",
                "token": create_reset_token(
                    "reset@example.com", password_fingerprint=password_fingerprint("old-hash")
                ),
            },
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
