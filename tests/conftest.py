"""Pytest configuration and fixtures."""

import os
from datetime import datetime, timedelta
from typing import AsyncGenerator

# Disable rate limiting for tests, must be set before importing the app
os.environ["TEAMSPACE_RATE_LIMIT_ENABLED"] = "false"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from teamspace.api.dependencies import get_clock, get_resolver
from teamspace.api.server import app
from teamspace.db import get_db, Base
from teamspace.db.repositories import TeamRepository
from teamspace.engine import build_dispatcher
from teamspace.engine.ports import TokenGenerator
from teamspace.security.identity import (
    EMAIL_CLAIM,
    PRINCIPAL_HEADER,
    ClientPrincipal,
    ClientPrincipalClaim,
    ClientPrincipalResolver,
    encode_principal,
)


# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeClock:
    """Settable clock so tests can move time forward."""

    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2024, 1, 15, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class SequenceTokenGenerator(TokenGenerator):
    """Predictable invite tokens: invite-1, invite-2, ..."""

    def __init__(self):
        self.issued = 0

    def generate(self) -> str:
        self.issued += 1
        return f"invite-{self.issued}"


def principal_headers(user_id: str, name: str = "", email: str = "") -> dict:
    """Headers as the hosting proxy would set them for ``user_id``."""
    claims = [ClientPrincipalClaim(typ=EMAIL_CLAIM, val=email)] if email else []
    principal = ClientPrincipal(
        user_id=user_id,
        user_details=name or user_id,
        identity_provider="aad",
        claims=claims,
    )
    return {PRINCIPAL_HEADER: encode_principal(principal)}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token_generator() -> SequenceTokenGenerator:
    return SequenceTokenGenerator()


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def test_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def repository(test_session: AsyncSession, clock: FakeClock) -> TeamRepository:
    return TeamRepository(test_session, clock=clock)


@pytest_asyncio.fixture(scope="function")
async def dispatcher(repository, token_generator, clock):
    """Handlers wired against the test database."""
    return build_dispatcher(repository, token_generator=token_generator, clock=clock)


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, clock: FakeClock) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_resolver] = lambda: ClientPrincipalResolver()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    """Headers for the user who creates teams in API tests."""
    return principal_headers("u1", name="Alice Admin", email="alice@example.com")


@pytest.fixture
def joiner_headers() -> dict:
    return principal_headers("u2", name="Bob Joiner", email="bob@example.com")


@pytest.fixture
def outsider_headers() -> dict:
    return principal_headers("u3", name="Carol Outsider", email="carol@example.com")
