"""
Pydantic request/response models for the advocate API.

Wire names are camelCase (``firstName``, ``totalPages``); Python attributes
are snake_case.  Models accept either form on input so store rows (snake_case
column names) validate directly.

Advocate is the single shape check applied to every record at the record
source boundary before it reaches a response.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StringConstraints,
)
from pydantic.alias_generators import to_camel

from utils.config import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    MAX_LIMIT,
    MAX_PAGE,
    MAX_SEARCH_LENGTH,
)

NonEmptyText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ── Advocate record ──────────────────────────────────────────────────────────

class AdvocateIn(_CamelModel):
    """An advocate record before insertion (no id or timestamp yet)."""
    first_name: NonEmptyText = Field(..., description="Given name", examples=["Jane"])
    last_name: NonEmptyText = Field(..., description="Family name", examples=["Smith"])
    city: NonEmptyText = Field(..., description="City of practice", examples=["Los Angeles"])
    degree: NonEmptyText = Field(..., description="Credential", examples=["PhD"])
    specialties: list[str] = Field(default_factory=list, description="Specialty labels, in display order")
    years_of_experience: StrictInt = Field(..., ge=0, description="Years in practice", examples=[8])
    phone_number: StrictInt = Field(..., gt=0, description="Phone number as digits", examples=[5559876543])


class Advocate(AdvocateIn):
    """A stored advocate record as returned by the API."""
    id: StrictInt = Field(..., gt=0, description="Unique record ID", examples=[2])
    created_at: datetime = Field(..., description="Insertion timestamp (ISO-8601)")


# ── Pagination envelope ──────────────────────────────────────────────────────

class PaginationInfo(_CamelModel):
    """Pagination metadata computed against the total matching count."""
    page: int = Field(..., description="1-based page number", examples=[1])
    limit: int = Field(..., description="Page size", examples=[20])
    total: int = Field(..., description="Rows matching the search across all pages", examples=[45])
    total_pages: int = Field(..., description="ceil(total / limit)", examples=[3])
    has_next: bool = Field(..., description="page < totalPages")
    has_prev: bool = Field(..., description="page > 1")


class AdvocatesResponse(_CamelModel):
    """Response body for GET /api/advocates."""
    data: list[Advocate] = Field(..., description="Advocates on this page, newest first")
    pagination: PaginationInfo


# ── Query parameters ─────────────────────────────────────────────────────────

class AdvocateQueryParams(BaseModel):
    """Validated query string for GET /api/advocates."""
    model_config = ConfigDict(extra="ignore")

    search: str = Field("", max_length=MAX_SEARCH_LENGTH, description="Free-text search")
    page: int = Field(DEFAULT_PAGE, ge=1, le=MAX_PAGE, description="1-based page number")
    limit: int = Field(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Page size")

    @property
    def search_term(self) -> str:
        return self.search.strip()


# ── Error model ──────────────────────────────────────────────────────────────

class ErrorResponse(BaseModel):
    """Standard error response body."""
    error: str = Field(..., description="Short error message", examples=["Invalid query parameters"])
    details: list[dict[str, Any]] | None = Field(
        None, description="Validation issues (400 responses only)",
    )
