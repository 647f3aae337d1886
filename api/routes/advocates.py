"""
GET /api/advocates endpoint.

Free-text search over advocates with page/limit pagination.  Results are
always newest first; ``total`` counts every row matching the search, not
just the returned page.

Query parameters are validated before the record source is touched.  A bad
``page``, ``limit`` or an over-long ``search`` answers 400 with the
validation issues in ``details``.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError

from api.errors import InvalidQueryError
from api.models import AdvocateQueryParams, AdvocatesResponse, ErrorResponse, PaginationInfo
from api.sources import AdvocateSource
from utils.query import page_offset, total_pages

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/advocates", tags=["advocates"])


def get_source(request: Request) -> AdvocateSource:
    """FastAPI dependency: the record source chosen by create_app()."""
    return request.app.state.advocate_source


def parse_query_params(
    search: str | None = None,
    page: str | None = None,
    limit: str | None = None,
) -> AdvocateQueryParams:
    """Validate raw query-string values into AdvocateQueryParams.

    Missing or blank ``page``/``limit`` take their defaults.

    Raises:
        InvalidQueryError: with pydantic's issue list as details.
    """
    raw: dict[str, str] = {"search": search or ""}
    if page is not None and page.strip():
        raw["page"] = page.strip()
    if limit is not None and limit.strip():
        raw["limit"] = limit.strip()
    try:
        return AdvocateQueryParams.model_validate(raw)
    except ValidationError as exc:
        details = jsonable_encoder(exc.errors(include_url=False))
        logger.info("Rejected advocate query params=%r issues=%d", raw, len(details))
        raise InvalidQueryError(details) from exc


def query_params_dependency(
    search: str | None = Query(None, description="Free-text search (max 100 characters)"),
    page: str | None = Query(None, description="1-based page number (1-1000, default 1)"),
    limit: str | None = Query(None, description="Page size (1-100, default 20)"),
) -> AdvocateQueryParams:
    return parse_query_params(search=search, page=page, limit=limit)


def build_pagination(page: int, limit: int, total: int) -> PaginationInfo:
    """Compute the pagination envelope for *page* given the filtered *total*."""
    pages = total_pages(total, limit)
    return PaginationInfo(
        page=page,
        limit=limit,
        total=total,
        total_pages=pages,
        has_next=page < pages,
        has_prev=page > 1,
    )


def search_advocates(
    params: AdvocateQueryParams,
    source: AdvocateSource,
) -> AdvocatesResponse:
    """Run one advocate search against *source* and shape the response."""
    result = source.fetch_page(
        params.search_term,
        limit=params.limit,
        offset=page_offset(params.page, params.limit),
    )
    return AdvocatesResponse(
        data=result.advocates,
        pagination=build_pagination(params.page, params.limit, result.total),
    )


@router.get(
    "",
    response_model=AdvocatesResponse,
    summary="Search advocates",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid query parameters"},
        500: {"model": ErrorResponse, "description": "Store unavailable or invalid stored data"},
    },
)
def list_advocates(
    params: AdvocateQueryParams = Depends(query_params_dependency),
    source: AdvocateSource = Depends(get_source),
) -> AdvocatesResponse:
    """Return a page of advocates matching ``search``, newest first.

    The search term matches (case-insensitive substring) first name, last
    name, city, degree, any specialty, or years of experience.
    """
    return search_advocates(params, source)
