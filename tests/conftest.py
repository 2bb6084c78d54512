from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool
from src.api.deps import get_db_session, get_email_service, get_google_client, get_otp_store
from src.api.main import app
from src.core.config import get_settings
from src.domain.reference_data import SERVICE_TYPES
from src.domain.services.notifications import EmailService
from src.infrastructure.db.base import Base
from src.infrastructure.db.models import ServiceType

from tests.utils import ADMIN_KEY, FakeGoogleClient, FakeOtpStore, FakeResendClient


async def seed_reference_data(session: AsyncSession) -> None:
    existing = await session.scalar(select(ServiceType.id).limit(1))
    if existing:
        return

    for service_type in SERVICE_TYPES:
        session.add(ServiceType(**service_type))
    await session.commit()


@pytest.fixture()
async def session_factory() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        await seed_reference_data(session)

    yield factory
    await engine.dispose()


@pytest.fixture()
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Provide a database session for tests that need direct DB access."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
def otp_store() -> FakeOtpStore:
    return FakeOtpStore()


@pytest.fixture()
def resend() -> FakeResendClient:
    return FakeResendClient()


@pytest.fixture()
def google() -> FakeGoogleClient:
    return FakeGoogleClient()


@pytest.fixture()
def email_service(resend: FakeResendClient) -> EmailService:
    return EmailService(client=resend)  # type: ignore[arg-type]


@pytest.fixture()
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
    otp_store: FakeOtpStore,
    email_service: EmailService,
    google: FakeGoogleClient,
    monkeypatch: pytest.MonkeyPatch,
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client wired to SQLite and in-memory fakes."""
    monkeypatch.setattr(get_settings(), "admin_api_key", ADMIN_KEY)

    async def override_db_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_otp_store] = lambda: otp_store
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_google_client] = lambda: google

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
