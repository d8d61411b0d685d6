"""
Directory service — paginated, searchable listing over the user table.

Every read of users that the API returns goes through query_users(), which
runs the same three stages for a page listing and for a single lookup:

  1. Filter:  apply the caller's criteria (none ⇒ every user).
  2. Facets:  from the same filtered set, compute
                - metadata: total number of matches
                - data:     the requested page, or just the first row when
                            no page options are given (point lookups)
              Both queries run back to back in the caller's transaction.
  3. Decorate: turn each row into a UserResponse with is_manager /
              is_superuser derived from role.

Text matching and ordering are case-insensitive: search compares lower()
on both sides, and text sorts order by lower(column) first, then by the
raw column so "alice" and "Alice" still come back in a stable order.
"""

import logging

from sqlalchemy import ColumnElement, String, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User, UserRole
from app.schemas.pagination import PageMetadata, PageOptions, SortField, SortOrder
from app.schemas.user import UserPage, UserResponse

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    SortField.CREATED_AT: User.created_at,
    SortField.NAME: User.name,
    SortField.EMAIL: User.email,
}
_TEXT_SORT_FIELDS = {SortField.NAME, SortField.EMAIL}


def search_filter(search: str | None) -> ColumnElement[bool] | None:
    """
    Build the "name OR email contains term" predicate.

    The term is matched literally: LIKE wildcards in it are escaped.
    Returns None for an empty search so that every user matches.
    """
    if not search:
        return None
    term = search.lower()
    return or_(
        func.lower(User.name, type_=String).contains(term, autoescape=True),
        func.lower(User.email, type_=String).contains(term, autoescape=True),
    )


def _order_by(page_options: PageOptions) -> list:
    column = _SORT_COLUMNS[page_options.sort_by]
    if page_options.sort_by in _TEXT_SORT_FIELDS:
        keys = [func.lower(column), column]
    else:
        keys = [column]
    keys.append(User.id)

    if page_options.order == SortOrder.DESC:
        return [key.desc() for key in keys]
    return [key.asc() for key in keys]


def decorate(user: User) -> UserResponse:
    """Public view of a user with the derived role flags filled in."""
    return UserResponse.model_validate(user).model_copy(
        update={
            "is_manager": user.role == UserRole.MANAGER,
            "is_superuser": user.role == UserRole.SUPERUSER,
        }
    )


async def query_users(
    db: AsyncSession,
    criteria: ColumnElement[bool] | None = None,
    page_options: PageOptions | None = None,
) -> UserPage:
    """
    Run the filter → facets → decorate pipeline over users.

    Args:
        db: Database session.
        criteria: Optional WHERE clause; None matches every user.
        page_options: Page to return. None returns at most one row, which
                      is how single-user lookups use this function.

    Returns:
        UserPage whose metadata.total counts the whole filtered set and
        echoes page_options (fields left as None when not paginating).
    """
    count_stmt = select(func.count()).select_from(User)
    # Rows may have been changed by bulk UPDATEs earlier in the transaction
    data_stmt = select(User).execution_options(populate_existing=True)
    if criteria is not None:
        count_stmt = count_stmt.where(criteria)
        data_stmt = data_stmt.where(criteria)

    if page_options is not None:
        data_stmt = (
            data_stmt
            .order_by(*_order_by(page_options))
            .offset(page_options.skip)
            .limit(page_options.take)
        )
    else:
        data_stmt = data_stmt.offset(0).limit(1)

    total = (await db.execute(count_stmt)).scalar_one()
    users = (await db.execute(data_stmt)).scalars().all()

    if page_options is not None:
        metadata = PageMetadata(total=total, **page_options.model_dump())
        logger.debug(
            "User directory page %s/%s: %d of %d rows",
            page_options.page, metadata.page_count, len(users), total,
        )
    else:
        metadata = PageMetadata(total=total)

    return UserPage(
        data=[decorate(user) for user in users],
        metadata=metadata,
    )
