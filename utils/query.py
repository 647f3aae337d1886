"""Shared search predicate and pagination helpers for the advocate routes.

The SQL builder and the in-process matcher implement the same predicate so
the store-backed and fixture-backed record sources return identical results
for the same search term.
"""

import math
from typing import Any, Iterable, Mapping

# Text columns searched with a case-insensitive substring match.
SEARCH_TEXT_COLUMNS = ("first_name", "last_name", "city", "degree")

_LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so *term* is matched literally.

    Examples:
        escape_like("50%") -> "50\\%"
        escape_like("a_b") -> "a\\_b"
    """
    return (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def build_search_clause(term: str | None) -> tuple[str, list[Any]]:
    """Build the WHERE clause for a free-text advocate search.

    An empty or whitespace-only term applies no filter.  Otherwise a row
    matches when the term appears (case-insensitive) in any text column,
    any specialty label, or the decimal form of years_of_experience.

    Both sides of each comparison go through ``casefold()``, the SQL function
    api.database.register_functions() installs on every connection.

    Args:
        term: Search text, already validated for length.

    Returns:
        Tuple of (where_clause_string, params_list). The where_clause_string
        starts with "WHERE " if a filter applies, or is "" if none.
    """
    term = (term or "").strip()
    if not term:
        return "", []

    pattern = f"%{escape_like(term.casefold())}%"
    conditions = [
        f"casefold({col}) LIKE ? ESCAPE '{_LIKE_ESCAPE}'"
        for col in SEARCH_TEXT_COLUMNS
    ]
    conditions.append(
        "EXISTS (SELECT 1 FROM json_each(advocates.specialties) "
        f"WHERE casefold(json_each.value) LIKE ? ESCAPE '{_LIKE_ESCAPE}')"
    )
    conditions.append(
        f"CAST(years_of_experience AS TEXT) LIKE ? ESCAPE '{_LIKE_ESCAPE}'"
    )
    params = [pattern] * len(conditions)
    return "WHERE (" + " OR ".join(conditions) + ")", params


def matches_search(record: Mapping[str, Any], term: str | None) -> bool:
    """Return True when *record* satisfies the search predicate for *term*.

    In-process twin of build_search_clause(); *record* uses the store's
    snake_case column names.
    """
    needle = (term or "").strip().casefold()
    if not needle:
        return True
    for col in SEARCH_TEXT_COLUMNS:
        if needle in str(record.get(col) or "").casefold():
            return True
    specialties: Iterable[Any] = record.get("specialties") or ()
    if any(needle in str(label).casefold() for label in specialties):
        return True
    return needle in str(record.get("years_of_experience", ""))


def page_offset(page: int, limit: int) -> int:
    """Row offset of a 1-based *page*."""
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed for *total* rows at *limit* rows per page."""
    if limit <= 0:
        return 0
    return math.ceil(total / limit)
