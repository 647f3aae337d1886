"""
Frontend HTML routes.

Serves the Jinja2 templates for the advocate search page.

Routes:
    GET /                       → index.html (search box + first page)
    GET /partials/advocates     → partials/advocates.html (HTMX swap target)

The search box asks for /partials/advocates 300 ms after the last
keystroke, always for page 1.  hx-sync="this:replace" aborts the previous
request when a new one starts, so an older response never replaces a newer
one.  static/js/advocates.js strips ``<``/``>`` from the search value before
each request and lets error responses swap in.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from api.errors import AdvocateError, InvalidQueryError
from api.routes.advocates import get_source, parse_query_params, search_advocates
from api.sources import AdvocateSource
from utils.strings import strip_angle_brackets

logger = logging.getLogger(__name__)

router = APIRouter(tags=["frontend"])

# Templates instance is set by create_app() after mounting.
_templates: Jinja2Templates | None = None


def set_templates(t: Jinja2Templates) -> None:
    global _templates
    _templates = t


def _tmpl() -> Jinja2Templates:
    if _templates is None:
        raise RuntimeError("Templates not initialised; call set_templates() first")
    return _templates


def _results_context(request: Request, source: AdvocateSource) -> tuple[dict[str, Any], int]:
    """Run the search for the current query string.

    Returns the template context and the HTTP status to render it with.
    """
    qp = request.query_params
    search = strip_angle_brackets(qp.get("search", ""))
    context: dict[str, Any] = {"search": search, "error": None}
    try:
        params = parse_query_params(
            search=search, page=qp.get("page"), limit=qp.get("limit"),
        )
        result = search_advocates(params, source)
    except InvalidQueryError:
        context["error"] = "Invalid search. Check the search text and page number."
        return context, 400
    except AdvocateError as exc:
        logger.error("Search page failed: %s context=%r", exc, exc.context)
        context["error"] = "Failed to fetch advocates"
        return context, exc.status_code

    context.update(
        advocates=result.data,
        pagination=result.pagination,
        search=params.search_term,
    )
    return context, 200


# ── Routes ────────────────────────────────────────────────────────────────────

@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def index(
    request: Request,
    source: AdvocateSource = Depends(get_source),
) -> HTMLResponse:
    """Main search page."""
    context, status = _results_context(request, source)
    return _tmpl().TemplateResponse(request, "index.html", context, status_code=status)


@router.get("/partials/advocates", response_class=HTMLResponse, include_in_schema=False)
def advocates_partial(
    request: Request,
    source: AdvocateSource = Depends(get_source),
) -> HTMLResponse:
    """HTMX partial: result summary, advocate grid and pagination controls."""
    context, status = _results_context(request, source)
    return _tmpl().TemplateResponse(
        request, "partials/advocates.html", context, status_code=status,
    )
