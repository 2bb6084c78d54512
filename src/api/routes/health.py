from __future__ import annotations

from datetime import UTC, datetime

import redis.asyncio as aioredis
import structlog
from fastapi import APIRouter
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from src.core.config import get_settings
from src.infrastructure.db.session import get_session_factory

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


async def check_postgres() -> dict:
    """Run ``SELECT 1`` against the primary database."""
    try:
        session_factory = get_session_factory()
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        return {"status": "error", "message": str(exc)[:100]}
    return {"status": "ok"}


async def check_redis() -> dict:
    """Ping the Redis instance backing the OTP store."""
    client = aioredis.from_url(get_settings().redis_url)
    try:
        await client.ping()
    except (RedisError, OSError) as exc:
        return {"status": "error", "message": str(exc)[:100]}
    finally:
        await client.aclose()
    return {"status": "ok"}


@router.get("/health", summary="Service health probe")
async def health_check() -> dict:
    """Return service metadata plus database and OTP store reachability."""
    settings = get_settings()

    datastores = {
        "postgres": await check_postgres(),
        "redis": await check_redis(),
    }
    healthy = all(probe["status"] == "ok" for probe in datastores.values())

    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
        "status": "ok" if healthy else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
        "datastores": datastores,
    }
    logger.info("health_probe", status=payload["status"], datastores=datastores)
    return payload
