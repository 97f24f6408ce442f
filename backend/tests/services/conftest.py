"""Service test fixtures: in-memory stores, async SQLite DB, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session factory
    - get_token_verifier overridden with a verifier on TEST_SECRET
    - Tokens are minted with PyJWT directly (issuance is not part of the app)

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL row locking not exercised here; conflicts are simulated)
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from communities.api.dependencies import get_token_verifier
from communities.core.domain_types import UserId
from communities.db.base import Base
from communities.infrastructure.database import get_db
from communities.infrastructure.memory_store import InMemoryMembershipStore
from communities.infrastructure.token_verifier import JwtTokenVerifier
from communities.main import app
from communities.models.user import UserModel
from communities.services.community_service import CommunityService
from tests.services.tokens import TEST_SECRET


@pytest.fixture
def memory_store():
    return InMemoryMembershipStore()


@pytest.fixture
def service(memory_store):
    return CommunityService(memory_store)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def seed_users(test_db):
    """Insert alice and bob into the users table. Returns {email: UserId}."""
    users = [
        UserModel(email="alice@example.com"),
        UserModel(email="bob@example.com"),
    ]
    test_db.add_all(users)
    await test_db.commit()
    return {u.email: UserId(u.id) for u in users}


@pytest.fixture
async def client(test_session_factory):
    """FastAPI test client with DB and token verifier overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_verifier] = (
        lambda: JwtTokenVerifier(TEST_SECRET, "HS256")
    )

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
