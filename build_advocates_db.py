"""
Advocate Store Seeder

Creates the advocates table (with its lookup indexes) in a SQLite file,
clears any existing rows, and bulk-inserts the static advocate dataset in a
single transaction.  Run out of band; the API never writes to the store.

Usage:
    python build_advocates_db.py                     # Seed advocates.sqlite
    python build_advocates_db.py --db mydb.sqlite    # Custom store path
    python build_advocates_db.py --rebuild           # Drop and recreate the table
"""

import argparse
import json
import logging
import os
import sqlite3
import sys
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from api.database import connect_writable, count_advocates, create_schema, drop_schema
from api.models import AdvocateIn
from utils.advocate_data import ADVOCATE_DATA

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path(os.getenv("APP_DB_PATH") or "advocates.sqlite")

_INSERT_SQL = """
    INSERT INTO advocates (
        first_name, last_name, city, degree, specialties,
        years_of_experience, phone_number
    ) VALUES (?, ?, ?, ?, ?, ?, ?)
"""


def _to_row(advocate: AdvocateIn) -> tuple:
    return (
        advocate.first_name,
        advocate.last_name,
        advocate.city,
        advocate.degree,
        json.dumps(advocate.specialties),
        advocate.years_of_experience,
        advocate.phone_number,
    )


def validate_seed_data(data: Iterable[dict[str, Any]]) -> list[AdvocateIn]:
    """Validate every seed record before anything touches the store.

    Raises:
        ValueError: naming the index of the first invalid record.
    """
    validated = []
    for i, item in enumerate(data):
        try:
            validated.append(AdvocateIn.model_validate(item))
        except ValidationError as exc:
            raise ValueError(f"Seed record {i} is invalid: {exc}") from exc
    return validated


def seed_database(
    db_path: Path,
    data: Iterable[dict[str, Any]] = ADVOCATE_DATA,
    rebuild: bool = False,
) -> int:
    """Replace the contents of the advocates table with *data*.

    Args:
        db_path: SQLite file to seed (created if missing).
        data: Advocate records without id/created_at.
        rebuild: Drop and recreate the table first (picks up schema changes).

    Returns:
        Number of rows inserted.
    """
    advocates = validate_seed_data(data)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = connect_writable(db_path)
    try:
        if rebuild:
            drop_schema(conn)
            print(f"Dropped advocates table for rebuild: {db_path}")
        create_schema(conn)
        with conn:
            cleared = conn.execute("DELETE FROM advocates").rowcount
            print(f"Cleared {cleared} existing advocate(s)")
            conn.executemany(_INSERT_SQL, [_to_row(a) for a in advocates])
        total = count_advocates(conn)
    except Exception:
        logger.exception("Seeding %s failed", db_path)
        raise
    finally:
        conn.close()

    print(f"Inserted {len(advocates)} advocate(s)")
    print(f"Total advocates in store: {total}")
    return len(advocates)


def main(argv: list[str] | None = None) -> int:
    """Parse command-line arguments and seed the store."""
    parser = argparse.ArgumentParser(description="Seed the advocate directory store")
    parser.add_argument("--db", type=Path, default=DEFAULT_DB_PATH,
                        help=f"Database path (default: {DEFAULT_DB_PATH})")
    parser.add_argument("--rebuild", action="store_true",
                        help="Drop and recreate the advocates table before seeding")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s %(message)s")
    try:
        seed_database(args.db, rebuild=args.rebuild)
    except (ValueError, OSError, sqlite3.Error) as e:
        print(f"ERROR: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
