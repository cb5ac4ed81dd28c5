"""
Pytest configuration and fixtures for Visiora backend tests.

Provides common fixtures for testing:
- Deterministic credential cipher
- Test database
- Users and stores
- Sample Shopify orders
"""

import os
import sys
from typing import AsyncGenerator, Dict, List

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

TEST_ENCRYPTION_KEY = "000102030405060708090a0b0c0d0e0f101112131415161718191a1b1c1d1e1f"
OTHER_ENCRYPTION_KEY = "ff" * 32

# Settings are read at import time
os.environ.setdefault("ENCRYPTION_KEY", TEST_ENCRYPTION_KEY)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from app.main import app  # noqa: E402
from app.core.crypto import CredentialCipher, get_cipher  # noqa: E402
from app.core.database import get_db  # noqa: E402
from app.models.database import Base, Store, User  # noqa: E402


# ============ Cipher Fixtures ============


@pytest.fixture
def cipher() -> CredentialCipher:
    """Cipher with a fixed test key."""
    return CredentialCipher(TEST_ENCRYPTION_KEY)


@pytest.fixture
def other_cipher() -> CredentialCipher:
    """Cipher with a different key, for wrong-key cases."""
    return CredentialCipher(OTHER_ENCRYPTION_KEY)


# ============ Database Fixtures ============


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="function")
async def test_db() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def override_get_db(test_db: AsyncSession):
    """Override the database dependency."""

    async def _get_db():
        yield test_db

    return _get_db


# ============ Client Fixtures ============


@pytest.fixture
async def client(override_get_db, cipher: CredentialCipher) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden dependencies."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cipher] = lambda: cipher
    app.state.cipher = cipher

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    del app.state.cipher


# ============ User / Store Fixtures ============


@pytest.fixture
async def test_user(test_db: AsyncSession) -> User:
    """Create a test user."""
    user = User(
        email="merchant@example.com",
        password_hash="$2b$12$test_hash_for_testing_only",
        name="Test Merchant",
    )
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest.fixture
async def test_store(test_db: AsyncSession, test_user: User, cipher: CredentialCipher) -> Store:
    """Create an active store for the test user with an encrypted token."""
    store = Store(
        user_id=test_user.id,
        shopify_domain="test-shop.myshopify.com",
        encrypted_access_token=cipher.encrypt("shpat_test_token"),
    )
    test_db.add(store)
    await test_db.commit()
    await test_db.refresh(store)
    return store


# ============ Sample Data Fixtures ============


@pytest.fixture
def sample_orders() -> List[Dict]:
    """Shopify orders spanning two days and every status the metrics look at."""
    return [
        {
            "id": 1001,
            "name": "#1001",
            "created_at": "2023-12-01T09:15:00-05:00",
            "total_price": "10.00",
            "fulfillment_status": None,
            "financial_status": "pending",
        },
        {
            "id": 1002,
            "name": "#1002",
            "created_at": "2023-12-01T17:40:00-05:00",
            "total_price": "5.00",
            "fulfillment_status": "fulfilled",
            "financial_status": "paid",
        },
        {
            "id": 1003,
            "name": "#1003",
            "created_at": "2023-12-03T08:00:00-05:00",
            "total_price": "2.00",
            "fulfillment_status": "partial",
            "financial_status": "authorized",
        },
        {
            "id": 1004,
            "name": "#1004",
            "created_at": "2023-12-03T11:00:00-05:00",
            "total_price": "not-a-price",
            "fulfillment_status": "restocked",
            "financial_status": "refunded",
        },
    ]
