"""Async database engine and session factory.

Supports both PostgreSQL (production) and SQLite (local dev and tests).
"""

from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from billing_sync.config import get_settings

settings = get_settings()

db_url = make_url(settings.database_url)

# SQLite: always run on aiosqlite, whatever driver the URL names
if db_url.get_backend_name() == "sqlite":
    db_url = db_url.set(drivername="sqlite+aiosqlite")
    if db_url.database in (None, "", ":memory:"):
        # In-memory databases only exist on a single shared connection
        engine = create_async_engine(
            db_url,
            echo=settings.debug,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        Path(db_url.database).parent.mkdir(parents=True, exist_ok=True)
        engine = create_async_engine(db_url, echo=settings.debug, connect_args={"check_same_thread": False})
else:
    engine = create_async_engine(db_url, echo=settings.debug, pool_pre_ping=True)

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
