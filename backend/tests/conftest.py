"""
Pytest configuration and fixtures.

Provides fixtures for:
- In-memory SQLite database sessions
- HTTP client with mocked rate limiting
- Test users with auth headers
- Catalog entries (brand, line, cigar) and humidor items
"""
from typing import AsyncGenerator
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from humidor_club.core.magic_links import get_magic_link_store
from humidor_club.db.base import Base
from humidor_club.db.session import get_db
from humidor_club.main import app
from humidor_club.models import Brand, Cigar, HumidorItem, Line, User
from humidor_club.services.auth import create_access_token

# Use SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_maker() as session:
        yield session
        await session.rollback()


def _mock_redis() -> AsyncMock:
    mock_redis = AsyncMock()
    mock_redis.incr = AsyncMock(return_value=1)  # Always under limit
    mock_redis.expire = AsyncMock(return_value=True)
    return mock_redis


@pytest_asyncio.fixture(scope="function")
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with rate limiting disabled."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with patch("humidor_club.middleware.rate_limit.redis.from_url", return_value=_mock_redis()):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clear_magic_links():
    """Each test starts with an empty development link store."""
    store = get_magic_link_store()
    if store is not None:
        store.clear()
    yield
    if store is not None:
        store.clear()


# -----------------------------------------------------------------------------
# User Fixtures
# -----------------------------------------------------------------------------

@pytest_asyncio.fixture
async def test_user(db_session) -> User:
    """Create a test user."""
    user = User(email="member@example.com", display_name="Member One", is_active=True)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_user_2(db_session) -> User:
    """Create a second user for ownership checks."""
    user = User(email="other@example.com", display_name="Member Two", is_active=True, region="Texas")
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def auth_headers(test_user) -> dict:
    """Bearer headers for test_user."""
    return {"Authorization": f"Bearer {create_access_token(test_user.id)}"}


@pytest_asyncio.fixture
async def auth_headers_2(test_user_2) -> dict:
    """Bearer headers for test_user_2."""
    return {"Authorization": f"Bearer {create_access_token(test_user_2.id)}"}


# -----------------------------------------------------------------------------
# Catalog Fixtures
# -----------------------------------------------------------------------------

@pytest_asyncio.fixture
async def test_brand(db_session) -> Brand:
    brand = Brand(name="Padrón", slug="padron", country="Nicaragua")
    db_session.add(brand)
    await db_session.commit()
    await db_session.refresh(brand)
    return brand


@pytest_asyncio.fixture
async def test_line(db_session, test_brand) -> Line:
    line = Line(brand_id=test_brand.id, name="1964 Anniversary Series", slug="1964-anniversary-series")
    db_session.add(line)
    await db_session.commit()
    await db_session.refresh(line)
    return line


@pytest_asyncio.fixture
async def test_cigar(db_session, test_line) -> Cigar:
    """A Toro with both street price and MSRP."""
    cigar = Cigar(
        line_id=test_line.id,
        vitola="Toro",
        ring_gauge=50,
        length_inches=6.0,
        length_mm=152,
        wrapper="Nicaraguan Maduro",
        country="Nicaragua",
        filler_tobaccos=[],
        image_urls=[],
        msrp_cents=2000,
        typical_street_cents=1500,
    )
    db_session.add(cigar)
    await db_session.commit()
    await db_session.refresh(cigar)
    return cigar


@pytest_asyncio.fixture
async def make_item(db_session, test_user, test_cigar):
    """Factory for humidor items owned by test_user by default."""

    async def _make(**overrides) -> HumidorItem:
        values = {
            "user_id": test_user.id,
            "cigar_id": test_cigar.id,
            "quantity": 10,
            "smoked_count": 0,
            "available_for_sale": 0,
            "available_for_trade": 0,
        }
        values.update(overrides)
        item = HumidorItem(**values)
        db_session.add(item)
        await db_session.commit()
        await db_session.refresh(item)
        return item

    return _make
