"""
Tests for transaction context managers.

Tests atomic() and savepoint() behavior for proper transaction boundaries.
"""
import pytest
from sqlalchemy import select

from humidor_club.db.transaction import atomic, savepoint
from humidor_club.models import Brand


async def _brand_exists(db_session, slug: str) -> bool:
    result = await db_session.execute(select(Brand).where(Brand.slug == slug))
    return result.scalar_one_or_none() is not None


async def test_atomic_commits_on_success(db_session):
    """Atomic context commits all changes on success."""
    async with atomic(db_session) as session:
        session.add(Brand(name="Oliva", slug="oliva"))

    assert await _brand_exists(db_session, "oliva")


async def test_atomic_rollbacks_on_failure(db_session):
    """Atomic context rolls back all changes on exception."""
    with pytest.raises(ValueError):
        async with atomic(db_session) as session:
            session.add(Brand(name="Davidoff", slug="davidoff"))
            await session.flush()
            raise ValueError("Simulated failure")

    assert not await _brand_exists(db_session, "davidoff")


async def test_savepoint_partial_rollback(db_session):
    """Savepoint allows partial rollback within transaction."""
    db_session.add(Brand(name="Tatuaje", slug="tatuaje"))
    await db_session.flush()

    with pytest.raises(ValueError):
        async with savepoint(db_session, "failing_batch"):
            db_session.add(Brand(name="Warped", slug="warped"))
            await db_session.flush()
            raise ValueError("Batch failed")

    await db_session.commit()

    assert await _brand_exists(db_session, "tatuaje")
    assert not await _brand_exists(db_session, "warped")


async def test_savepoint_commits_on_success(db_session):
    """Savepoint keeps changes when no exception occurs."""
    async with savepoint(db_session, "success_batch") as session:
        session.add(Brand(name="Foundation", slug="foundation"))

    await db_session.commit()

    assert await _brand_exists(db_session, "foundation")
