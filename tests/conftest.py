from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import pytest_asyncio
from models import Base, Order, OrderRepository, RecordingCache, seed_rows
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from criteria_repository import CachedRepository

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as sess:
        sess.add_all(seed_rows())
        await sess.flush()
        sess.expunge_all()
        yield sess


@pytest.fixture
def repo(session) -> OrderRepository:
    return OrderRepository(session)


@pytest.fixture
def cache() -> RecordingCache:
    return RecordingCache()


@pytest.fixture
def cached(repo, cache) -> CachedRepository[Order]:
    return CachedRepository(repo, cache)
