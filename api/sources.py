"""
Record sources for advocate queries.

Request handling talks to exactly one AdvocateSource, chosen once at startup
by select_source():

    SqliteAdvocateSource      store configured (APP_DB_PATH set)
    FixtureAdvocateSource     no store, APP_STORE_FALLBACK=fixture
    UnavailableAdvocateSource no store, APP_STORE_FALLBACK=error

All variants share the same search predicate (utils/query.py), the same
newest-first ordering, and the same output check: every raw record goes
through the Advocate model in AdvocateSource.fetch_page().  One bad record
fails the whole page.
"""

import json
import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from pydantic import ValidationError

from api.database import ConnectionPool, count_advocates
from api.errors import RecordValidationError, StoreQueryError, StoreUnavailableError
from api.models import Advocate
from utils.advocate_data import ADVOCATE_DATA
from utils.config import STORE_FALLBACK_FIXTURE, AppConfig
from utils.query import build_search_clause, matches_search

logger = logging.getLogger(__name__)

_SELECT_COLUMNS = """
    id, first_name, last_name, city, degree, specialties,
    years_of_experience, phone_number, created_at
"""

_ORDER_BY = "ORDER BY created_at DESC, id DESC"


@dataclass
class RawPage:
    """Unvalidated rows for one page plus the filtered total."""
    rows: list[dict[str, Any]]
    total: int


@dataclass
class AdvocatePage:
    """Validated advocates for one page plus the filtered total."""
    advocates: list[Advocate]
    total: int


def validate_records(rows: Iterable[dict[str, Any]]) -> list[Advocate]:
    """Validate raw rows against the Advocate shape, all or nothing.

    Raises:
        RecordValidationError: on the first row that does not validate.
    """
    advocates: list[Advocate] = []
    for row in rows:
        try:
            advocates.append(Advocate.model_validate(row))
        except ValidationError as exc:
            logger.error(
                "Advocate record failed validation id=%r errors=%s record=%r",
                row.get("id"), exc.errors(include_url=False), row,
            )
            raise RecordValidationError(
                f"Invalid advocate data: {exc}", record_id=row.get("id"),
            ) from exc
    return advocates


class AdvocateSource:
    """Base class: subclasses implement _fetch_raw() and count()."""

    name = "base"

    def fetch_page(self, search: str, limit: int, offset: int) -> AdvocatePage:
        """Return one validated page of advocates matching *search*.

        Args:
            search: Search term (empty means no filter).
            limit: Page size.
            offset: Rows to skip.
        """
        raw = self._fetch_raw(search.strip(), limit, offset)
        return AdvocatePage(advocates=validate_records(raw.rows), total=raw.total)

    def _fetch_raw(self, search: str, limit: int, offset: int) -> RawPage:
        raise NotImplementedError

    def count(self) -> int:
        """Unfiltered record count (health check)."""
        raise NotImplementedError

    def close(self) -> None:
        """Release any held resources."""


# ── Store-backed ─────────────────────────────────────────────────────────────

def _decode_row(row: sqlite3.Row) -> dict[str, Any]:
    record = dict(row)
    raw = record.get("specialties")
    if isinstance(raw, (str, bytes)):
        try:
            record["specialties"] = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Undecodable specialties for advocate id=%r: %r",
                         record.get("id"), raw)
            raise RecordValidationError(
                "specialties is not a JSON array", record_id=record.get("id"),
            ) from exc
    return record


class SqliteAdvocateSource(AdvocateSource):
    """Reads advocates from the SQLite store through a connection pool."""

    name = "sqlite"

    def __init__(self, pool: ConnectionPool) -> None:
        self.pool = pool

    def _fetch_raw(self, search: str, limit: int, offset: int) -> RawPage:
        where, params = build_search_clause(search)
        sql = (
            f"SELECT {_SELECT_COLUMNS}, COUNT(*) OVER () AS total_count "
            f"FROM advocates {where} {_ORDER_BY} LIMIT ? OFFSET ?"
        )
        try:
            with self.pool.connection() as conn:
                rows = conn.execute(sql, params + [limit, offset]).fetchall()
                if rows:
                    total = rows[0]["total_count"]
                elif offset > 0:
                    # Past the last page the window count has no row to ride on.
                    total = conn.execute(
                        f"SELECT COUNT(*) FROM advocates {where}", params
                    ).fetchone()[0]
                else:
                    total = 0
        except sqlite3.Error as exc:
            logger.error(
                "Advocate query failed search=%r limit=%d offset=%d: %s",
                search, limit, offset, exc, exc_info=True,
            )
            raise StoreQueryError(str(exc), search=search) from exc

        records = []
        for row in rows:
            record = _decode_row(row)
            record.pop("total_count", None)
            records.append(record)
        return RawPage(rows=records, total=total)

    def count(self) -> int:
        try:
            with self.pool.connection() as conn:
                return count_advocates(conn)
        except sqlite3.Error as exc:
            raise StoreQueryError(str(exc)) from exc

    def close(self) -> None:
        self.pool.close_all()


# ── Fixture-backed ───────────────────────────────────────────────────────────

_FIXTURE_EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


def build_fixture_records(
    data: Iterable[dict[str, Any]] = ADVOCATE_DATA,
    base_time: datetime = _FIXTURE_EPOCH,
) -> list[dict[str, Any]]:
    """Assign ids 1..N and one-minute-apart created_at values to *data*.

    Later entries are newer, matching the order a seed insert produces.
    """
    records = []
    for i, item in enumerate(data):
        record = dict(item)
        record["specialties"] = list(item.get("specialties") or [])
        record["id"] = i + 1
        record["created_at"] = base_time + timedelta(minutes=i)
        records.append(record)
    return records


class FixtureAdvocateSource(AdvocateSource):
    """Filters and paginates a static in-process dataset."""

    name = "fixture"

    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        self.records = records if records is not None else build_fixture_records()
        self._ordered = sorted(
            self.records,
            key=lambda r: (r["created_at"], r["id"]),
            reverse=True,
        )

    def _fetch_raw(self, search: str, limit: int, offset: int) -> RawPage:
        matched = [r for r in self._ordered if matches_search(r, search)]
        return RawPage(rows=matched[offset:offset + limit], total=len(matched))

    def count(self) -> int:
        return len(self.records)


# ── No store ─────────────────────────────────────────────────────────────────

class UnavailableAdvocateSource(AdvocateSource):
    """Fails every query: no store is configured and no fallback is allowed."""

    name = "unavailable"

    def _fetch_raw(self, search: str, limit: int, offset: int) -> RawPage:
        logger.error("Advocate query with no store configured search=%r", search)
        raise StoreUnavailableError()

    def count(self) -> int:
        raise StoreUnavailableError()


def select_source(config: AppConfig) -> AdvocateSource:
    """Pick the record source for *config*.  Called once per application."""
    config.validate()
    if config.has_store:
        pool = ConnectionPool(
            config.db_path,
            max_size=config.pool_size,
            idle_timeout=config.pool_idle_timeout,
            connect_timeout=config.connect_timeout,
        )
        logger.info("Serving advocates from SQLite store %s", config.db_path)
        return SqliteAdvocateSource(pool)
    if config.store_fallback == STORE_FALLBACK_FIXTURE:
        logger.warning("APP_DB_PATH not set; serving the static fixture dataset")
        return FixtureAdvocateSource()
    logger.warning("APP_DB_PATH not set; advocate queries will fail with 500")
    return UnavailableAdvocateSource()
