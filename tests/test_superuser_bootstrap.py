"""
Tests for the startup superuser bootstrap.

These tests verify:
  - With credentials configured, exactly one ACTIVE superuser is created
  - Running the bootstrap repeatedly never creates a second one
  - Missing credentials make it a no-op
  - The partial unique index refuses a second superuser row even when the
    application-level check is bypassed
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.models.user import User, UserRole, UserStatus
from app.security import verify_password
from app.services import user_service


async def _superuser_count(db_session) -> int:
    return await db_session.scalar(
        select(func.count()).select_from(User).where(User.role == UserRole.SUPERUSER)
    )


async def test_creates_active_superuser(db_session):
    user = await user_service.bootstrap_superuser(
        db_session, "root@example.com", "RootPass123!",
    )

    assert user is not None
    assert user.role == UserRole.SUPERUSER
    assert user.status == UserStatus.ACTIVE
    assert user.verification_code is None
    assert verify_password("RootPass123!", user.hashed_password)


async def test_idempotent(db_session):
    for _ in range(5):
        await user_service.bootstrap_superuser(db_session, "root@example.com", "RootPass123!")

    assert await _superuser_count(db_session) == 1


@pytest.mark.parametrize(
    "email, password",
    [(None, "RootPass123!"), ("root@example.com", None), ("", "")],
)
async def test_missing_credentials_is_noop(db_session, email, password):
    assert await user_service.bootstrap_superuser(db_session, email, password) is None
    assert await _superuser_count(db_session) == 0


async def test_existing_superuser_is_kept(db_session, make_user):
    existing = await make_user(email="first-root@example.com", role=UserRole.SUPERUSER)

    result = await user_service.bootstrap_superuser(
        db_session, "root@example.com", "RootPass123!",
    )

    assert result is None
    assert await _superuser_count(db_session) == 1
    only = await db_session.scalar(select(User).where(User.role == UserRole.SUPERUSER))
    assert only.id == existing.id


async def test_email_taken_by_regular_user(db_session, make_user):
    """A clash with an ordinary account leaves the table as it was."""
    await make_user(email="root@example.com", role=UserRole.USER)

    result = await user_service.bootstrap_superuser(
        db_session, "root@example.com", "RootPass123!",
    )

    assert result is None
    assert await _superuser_count(db_session) == 0


async def test_concurrent_bootstrap_loses_gracefully(db_session, make_user, monkeypatch):
    """Another process inserted a superuser between our check and our insert."""
    await make_user(email="other-root@example.com", role=UserRole.SUPERUSER)

    async def _nobody_yet(db):
        return False

    monkeypatch.setattr(user_service, "_superuser_exists", _nobody_yet)

    result = await user_service.bootstrap_superuser(
        db_session, "root@example.com", "RootPass123!",
    )

    assert result is None
    assert await _superuser_count(db_session) == 1


async def test_index_allows_single_superuser(db_session, make_user):
    await make_user(role=UserRole.SUPERUSER)

    with pytest.raises(IntegrityError):
        await make_user(role=UserRole.SUPERUSER)
    await db_session.rollback()

    assert await _superuser_count(db_session) == 1


async def test_index_allows_many_managers(db_session, make_user):
    await make_user(role=UserRole.MANAGER)
    await make_user(role=UserRole.MANAGER)

    count = await db_session.scalar(
        select(func.count()).select_from(User).where(User.role == UserRole.MANAGER)
    )
    assert count == 2
