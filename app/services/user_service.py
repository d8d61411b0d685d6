"""
User service — account lifecycle and user lookups.

This module owns every mutation of a User. The status machine is:

    request_user ──▶ REQUEST ──approve_user──▶ IN_ACTIVE ──activate_user──▶ ACTIVE
    create_user  ─────────────────────────────▶ IN_ACTIVE (ACTIVE if SUPERUSER)

  - resend_verification replaces the code of an IN_ACTIVE user.
  - update_user touches name and role only; status and email never change.
  - delete_user is a hard delete.

Atomic transitions:
  approve_user, resend_verification and activate_user each apply their
  change with a single UPDATE whose WHERE clause includes the expected
  current status. Two concurrent callers cannot both pass that guard, so
  the loser sees zero affected rows and gets an error instead of a silent
  double transition.

Uniqueness:
  Emails are checked up front for a precise error (pending request vs.
  existing user), and the unique index on users.email settles the race
  where two requests pass the check at the same time: the second insert
  fails with IntegrityError, reported as DuplicateEmailError.

Verification codes are returned to the caller; delivering them (email,
SMS...) is not done here. _dispatch_verification is the hook for it.
"""

import logging
import uuid

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    DuplicateEmailError,
    InvalidRoleError,
    PendingRequestError,
    ResendVerificationError,
    SuperuserExistsError,
    UserAlreadyActiveError,
    UserNotFoundError,
    UserRequestNotFoundError,
)
from app.models.user import User, UserRole, UserStatus
from app.schemas.pagination import PageOptions
from app.schemas.user import UserPage, UserResponse
from app.security import generate_verification_code, hash_password
from app.services import directory_service

logger = logging.getLogger(__name__)

# Explicit input-name → role table; anything not listed is rejected
_ROLE_NAMES = {
    "USER": UserRole.USER,
    "MANAGER": UserRole.MANAGER,
    "SUPERUSER": UserRole.SUPERUSER,
}


def parse_role(value: str) -> UserRole:
    """
    Map a role name from client input onto UserRole.

    Matching is case-insensitive and ignores surrounding whitespace.

    Raises:
        InvalidRoleError: If the name is not one of USER, MANAGER, SUPERUSER.
    """
    role = _ROLE_NAMES.get(value.strip().upper())
    if role is None:
        raise InvalidRoleError(value)
    return role


def _dispatch_verification(user_id: uuid.UUID, email: str) -> None:
    # Delivery channel not wired yet; the code is handed back to the caller
    logger.info("Verification code issued for user %s <%s>", user_id, email)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def get_users(db: AsyncSession, page_options: PageOptions) -> UserPage:
    """List users whose name or email contains page_options.search."""
    return await directory_service.query_users(
        db,
        directory_service.search_filter(page_options.search),
        page_options,
    )


async def find_user_by_id(db: AsyncSession, user_id: uuid.UUID) -> UserResponse:
    """
    Get the decorated view of one user.

    Raises:
        UserNotFoundError: If no user has this id.
    """
    page = await directory_service.query_users(db, User.id == user_id)
    if not page.data:
        raise UserNotFoundError(f"User {user_id} does not exist")
    return page.data[0]


async def find_user_by(db: AsyncSession, **criteria) -> User:
    """
    Get the first user whose columns equal the given values.

    Example:
        await find_user_by(db, verification_code=code)

    Raises:
        UserNotFoundError: If nothing matches.
    """
    result = await db.execute(
        select(User)
        .filter_by(**criteria)
        .limit(1)
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise UserNotFoundError()
    return user


async def _get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    # populate_existing: rows may have been changed by a bulk UPDATE
    user = await db.get(User, user_id, populate_existing=True)
    if user is None:
        raise UserNotFoundError(f"User {user_id} does not exist")
    return user


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

async def _superuser_exists(db: AsyncSession) -> bool:
    result = await db.execute(
        select(User.id).where(User.role == UserRole.SUPERUSER).limit(1)
    )
    return result.scalar_one_or_none() is not None


async def _existing_status(db: AsyncSession, email: str) -> UserStatus | None:
    """Status of the user holding this email, or None if it is free."""
    result = await db.execute(select(User.status).where(User.email == email))
    return result.scalar_one_or_none()


async def _insert_user(db: AsyncSession, user: User) -> User:
    """Add and flush, turning a unique-index violation into a domain error."""
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        logger.warning("Insert of user <%s> lost a uniqueness race", user.email)
        # SQLite names the column (users.email), PostgreSQL the index (ix_users_email)
        if user.role == UserRole.SUPERUSER and "email" not in str(exc.orig):
            raise SuperuserExistsError() from exc
        raise DuplicateEmailError(user.email) from exc
    return user


async def create_user(
    db: AsyncSession,
    name: str,
    email: str,
    role: UserRole,
    password: str | None = None,
) -> tuple[User, str]:
    """
    Create a user directly (administrative path, no approval step).

    Superusers start ACTIVE; every other role starts IN_ACTIVE and must be
    activated with the returned verification code.

    Args:
        db: Database session.
        name: Display name.
        email: Must not belong to any existing user.
        role: Role of the new user.
        password: Optional; hashed before storage. Usually omitted so the
                  user sets it during activation.

    Returns:
        Tuple of (User instance, verification code).

    Raises:
        DuplicateEmailError: If any user, pending requests included, holds
            this email.
        SuperuserExistsError: If role is SUPERUSER and one already exists.
    """
    if await _existing_status(db, email) is not None:
        raise DuplicateEmailError(email)
    if role == UserRole.SUPERUSER and await _superuser_exists(db):
        raise SuperuserExistsError()

    verification_code = generate_verification_code()
    user = await _insert_user(
        db,
        User(
            email=email,
            name=name,
            hashed_password=hash_password(password) if password else None,
            role=role,
            status=UserStatus.ACTIVE if role == UserRole.SUPERUSER else UserStatus.IN_ACTIVE,
            verification_code=verification_code,
        ),
    )

    logger.info("Created user %s with role %s", user.id, role.name)
    _dispatch_verification(user.id, user.email)
    return user, verification_code


async def request_user(db: AsyncSession, name: str, email: str) -> User:
    """
    Record a self-service account request (status REQUEST, role USER).

    The request carries no password and no verification code; both come
    later, through approval and activation.

    Raises:
        PendingRequestError: If a request for this email is already pending.
        DuplicateEmailError: If a user with this email already exists.
    """
    status = await _existing_status(db, email)
    if status == UserStatus.REQUEST:
        raise PendingRequestError(email)
    if status is not None:
        raise DuplicateEmailError(email)

    user = await _insert_user(
        db,
        User(
            email=email,
            name=name,
            role=UserRole.USER,
            status=UserStatus.REQUEST,
        ),
    )

    logger.info("Account requested for <%s> (user %s)", email, user.id)
    return user


async def bootstrap_superuser(
    db: AsyncSession,
    email: str | None,
    password: str | None,
    name: str = "Super User",
) -> User | None:
    """
    Create the superuser if none exists and credentials are configured.

    Safe to call on every process start: an existing superuser, missing
    credentials, or losing a race against another starting process all
    leave the table untouched. This function owns its transaction, so it
    commits on success and rolls back after a lost race.

    Returns:
        The created superuser, or None when nothing was created.
    """
    if not email or not password:
        logger.info("Superuser credentials not configured; skipping bootstrap")
        return None

    if await _superuser_exists(db):
        logger.debug("Superuser already present; skipping bootstrap")
        return None

    user = User(
        email=email,
        name=name,
        hashed_password=hash_password(password),
        role=UserRole.SUPERUSER,
        status=UserStatus.ACTIVE,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning(
            "Superuser bootstrap skipped: a superuser or a user with <%s> "
            "already exists", email,
        )
        return None

    logger.info("Bootstrapped superuser %s <%s>", user.id, email)
    return user


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

async def approve_user(db: AsyncSession, user_id: uuid.UUID) -> str:
    """
    Move a requested account to IN_ACTIVE and issue its verification code.

    Returns:
        The new verification code.

    Raises:
        UserRequestNotFoundError: If no user with this id is in REQUEST
            status (unknown id and already-approved user alike).
    """
    verification_code = generate_verification_code()

    result = await db.execute(
        update(User)
        .where(User.id == user_id, User.status == UserStatus.REQUEST)
        .values(status=UserStatus.IN_ACTIVE, verification_code=verification_code)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise UserRequestNotFoundError(user_id)

    logger.info("Approved account request for user %s", user_id)
    user = await _get_user(db, user_id)
    _dispatch_verification(user.id, user.email)
    return verification_code


async def resend_verification(db: AsyncSession, user_id: uuid.UUID) -> str:
    """
    Replace the verification code of an IN_ACTIVE user.

    The previous code stops working since lookups are by exact code.

    Returns:
        The new verification code.

    Raises:
        ResendVerificationError: If no user with this id is IN_ACTIVE.
    """
    verification_code = generate_verification_code()

    result = await db.execute(
        update(User)
        .where(User.id == user_id, User.status == UserStatus.IN_ACTIVE)
        .values(verification_code=verification_code)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise ResendVerificationError(user_id)

    user = await _get_user(db, user_id)
    _dispatch_verification(user.id, user.email)
    return verification_code


async def activate_user(
    db: AsyncSession,
    verification_code: str,
    new_password: str,
) -> User:
    """
    Set the password of the account holding this code and make it ACTIVE.

    The code is the credential here: no user id is needed.

    Raises:
        UserNotFoundError: If no user holds this code.
        UserAlreadyActiveError: If the account is already ACTIVE, including
            when a concurrent activation got there first.
    """
    user = await find_user_by(db, verification_code=verification_code)
    if user.status == UserStatus.ACTIVE:
        raise UserAlreadyActiveError()

    result = await db.execute(
        update(User)
        .where(User.id == user.id, User.status != UserStatus.ACTIVE)
        .values(status=UserStatus.ACTIVE, hashed_password=hash_password(new_password))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise UserAlreadyActiveError()

    await db.refresh(user)
    logger.info("Activated user %s", user.id)
    return user


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------

async def update_user(
    db: AsyncSession,
    user_id: uuid.UUID,
    name: str | None = None,
    role: UserRole | None = None,
) -> User:
    """
    Change a user's name and/or role. Arguments left as None are unchanged.

    Raises:
        UserNotFoundError: If no user has this id.
        SuperuserExistsError: If promoting to SUPERUSER while another
            user already holds that role.
    """
    user = await _get_user(db, user_id)

    if name is not None:
        user.name = name
    if role is not None and role != user.role:
        if role == UserRole.SUPERUSER and await _superuser_exists(db):
            raise SuperuserExistsError()
        user.role = role

    try:
        await db.flush()
    except IntegrityError as exc:
        raise SuperuserExistsError() from exc
    await db.refresh(user)
    return user


async def delete_user(db: AsyncSession, user_id: uuid.UUID) -> None:
    """
    Permanently remove a user and their carts.

    Raises:
        UserNotFoundError: If no user has this id.
    """
    user = await _get_user(db, user_id)
    await db.delete(user)
    await db.flush()
    logger.info("Deleted user %s", user_id)
