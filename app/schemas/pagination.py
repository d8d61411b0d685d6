"""
Pydantic schemas for paginated directory listings.

A listing request carries PageOptions; the response carries the page rows
plus PageMetadata, which echoes the options back next to the total count
so a client can render "page X of Y" without a second request.
"""

import enum
import math

from pydantic import BaseModel, Field, computed_field


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class SortField(str, enum.Enum):
    CREATED_AT = "created_at"
    NAME = "name"
    EMAIL = "email"


class PageOptions(BaseModel):
    """Which slice of a listing to return, and how to order and filter it."""
    page: int = Field(1, ge=1)
    take: int = Field(10, ge=1)
    order: SortOrder = SortOrder.ASC
    sort_by: SortField = SortField.CREATED_AT
    search: str = ""

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.take


class PageMetadata(BaseModel):
    """
    Count of the whole filtered set, plus the echoed page options.

    The echoed fields are None for single-record lookups, which do not
    paginate.
    """
    total: int = 0
    page: int | None = None
    take: int | None = None
    order: SortOrder | None = None
    sort_by: SortField | None = None
    search: str | None = None

    @computed_field
    @property
    def page_count(self) -> int | None:
        if not self.take:
            return None
        return math.ceil(self.total / self.take)
