"""
Tests for create-if-absent operations under concurrent callers.

Each caller gets its own session, as separate API requests or separate
processes would, and all of them run at once against one file-backed
SQLite database (an in-memory database would share a single connection).

These tests verify:
  - Concurrent account requests for one email store exactly one user
  - Concurrent superuser bootstraps create exactly one superuser
"""

import asyncio

import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.database import Base
from app.exceptions import ConflictError
from app.models.user import User, UserRole
from app.services import user_service

CALLERS = 5


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Sessionmaker over a fresh on-disk database; one session per caller."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'shop.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


async def _count(session_factory, *criteria) -> int:
    async with session_factory() as session:
        return await session.scalar(
            select(func.count()).select_from(User).where(*criteria)
        )


async def test_concurrent_requests_store_one_user(session_factory):
    async def request(n):
        async with session_factory() as session:
            try:
                await user_service.request_user(session, f"Alice {n}", "alice@example.com")
                await session.commit()
            except ConflictError as exc:
                return exc
            return "stored"

    results = await asyncio.gather(*(request(n) for n in range(CALLERS)))

    assert results.count("stored") == 1
    assert all(isinstance(r, ConflictError) for r in results if r != "stored")
    assert await _count(session_factory, User.email == "alice@example.com") == 1


async def test_concurrent_bootstraps_create_one_superuser(session_factory):
    async def bootstrap(n):
        async with session_factory() as session:
            return await user_service.bootstrap_superuser(
                session, f"root{n}@example.com", "RootPass123!",
            )

    results = await asyncio.gather(*(bootstrap(n) for n in range(CALLERS)))

    created = [r for r in results if r is not None]
    assert len(created) == 1
    assert created[0].role == UserRole.SUPERUSER
    assert await _count(session_factory, User.role == UserRole.SUPERUSER) == 1
