"""Shared fixtures: a throwaway SQLite database per test and an API client bound to it."""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("ENABLE_BACKGROUND_TASKS", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import smart_checkin.models  # noqa: F401
from smart_checkin.api.v1.endpoints.webauthn import get_webauthn_verifier
from smart_checkin.database import Base, get_db
from smart_checkin.main import app
from smart_checkin.services.reservation_service import ReservationService
from smart_checkin.services.webauthn_verifier import WebAuthnVerifier

from soft_authenticator import SoftAuthenticator

ADMIN_AUTH = ("admin", "change-this-password")


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def reservation(db):
    return await ReservationService(db).create_reservation(door_pin="482913")


@pytest.fixture
def authenticator():
    return SoftAuthenticator(rp_id="localhost", origin="http://localhost:3000")


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_webauthn_verifier] = lambda: WebAuthnVerifier(
        rp_id="localhost", origin="http://localhost:3000"
    )

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def admin_auth():
    return ADMIN_AUTH
