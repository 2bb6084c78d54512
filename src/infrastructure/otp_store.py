"""
One-time-password storage for the password reset flow.

Codes live in Redis under ``otp:<email>`` with a TTL, so expiry is enforced
by the store and nothing accumulates in the API process.
"""

from __future__ import annotations

from typing import Protocol

import redis.asyncio as aioredis
import structlog
from src.core.config import get_settings

logger = structlog.get_logger(__name__)

KEY_PREFIX = "otp:"


class OtpStore(Protocol):
    """Keyed OTP storage with per-entry expiry."""

    async def save(self, email: str, otp: str, ttl_seconds: int) -> None: ...

    async def get(self, email: str) -> str | None: ...

    async def delete(self, email: str) -> None: ...


class RedisOtpStore:
    """OTP store backed by Redis ``SET ... EX``."""

    def __init__(self, client: aioredis.Redis | None = None) -> None:
        self.client = client or aioredis.from_url(
            get_settings().redis_url, decode_responses=True
        )

    @staticmethod
    def _key(email: str) -> str:
        return f"{KEY_PREFIX}{email.lower()}"

    async def save(self, email: str, otp: str, ttl_seconds: int) -> None:
        await self.client.set(self._key(email), otp, ex=ttl_seconds)
        await logger.adebug("otp_saved", email=email, ttl_seconds=ttl_seconds)

    async def get(self, email: str) -> str | None:
        value = await self.client.get(self._key(email))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def delete(self, email: str) -> None:
        await self.client.delete(self._key(email))

    async def close(self) -> None:
        await self.client.aclose()
