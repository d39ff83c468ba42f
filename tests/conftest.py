"""Shared fixtures for the billing sync test suite."""

from __future__ import annotations

import os

# Settings are cached on first use, so the environment must be in place
# before anything from billing_sync is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["PROFILE_STORE_BACKEND"] = "sql"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["APP_URL"] = "https://app.example.com"

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from billing_sync.models import Base, Profile
from helpers import InMemoryProfileStore


@pytest.fixture
def profile_store() -> InMemoryProfileStore:
    store = InMemoryProfileStore()
    store.add("cus_1")
    return store


@pytest.fixture
async def db_session():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
async def seeded_profile(db_session) -> Profile:
    profile = Profile(email="ada@example.com", stripe_customer_id="cus_1", subscription_price_id="price_old")
    db_session.add(profile)
    await db_session.commit()
    return profile
