"""
Store connection management and schema for the advocate directory.

The store is a single SQLite file holding the ``advocates`` table.  Request
handling reads through a bounded pool of read-only connections; the seeding
job opens its own writable connection.

Pool behaviour:
  - Connections are opened lazily up to ``max_size``.
  - A released connection goes back to the pool; one that sat idle longer
    than ``idle_timeout`` seconds is closed on the next acquire instead of
    being reused.
  - ``connect_timeout`` bounds both the SQLite lock wait and the wait for a
    free pooled connection.
"""

import logging
import queue
import sqlite3
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

TABLE_NAME = "advocates"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS advocates (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL,
    city TEXT NOT NULL,
    degree TEXT NOT NULL,
    specialties TEXT NOT NULL DEFAULT '[]',
    years_of_experience INTEGER NOT NULL CHECK (years_of_experience >= 0),
    phone_number INTEGER NOT NULL CHECK (phone_number > 0),
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
CREATE INDEX IF NOT EXISTS first_name_idx ON advocates (first_name);
CREATE INDEX IF NOT EXISTS last_name_idx ON advocates (last_name);
CREATE INDEX IF NOT EXISTS city_idx ON advocates (city);
CREATE INDEX IF NOT EXISTS degree_idx ON advocates (degree);
CREATE INDEX IF NOT EXISTS experience_idx ON advocates (years_of_experience);
CREATE INDEX IF NOT EXISTS name_search_idx ON advocates (first_name, last_name);
CREATE INDEX IF NOT EXISTS experience_range_idx ON advocates (years_of_experience)
    WHERE years_of_experience > 0;
CREATE INDEX IF NOT EXISTS created_at_idx ON advocates (created_at DESC, id DESC);
"""


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the advocates table and its lookup indexes if missing."""
    conn.executescript(SCHEMA_SQL)


def drop_schema(conn: sqlite3.Connection) -> None:
    """Drop the advocates table (indexes go with it)."""
    conn.execute(f"DROP TABLE IF EXISTS {TABLE_NAME}")


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def register_functions(conn: sqlite3.Connection) -> None:
    """Register the SQL functions the search predicate relies on.

    ``casefold(x)`` applies Python's full Unicode case folding; SQLite's own
    LIKE and lower() only fold ASCII letters.
    """
    conn.create_function("casefold", 1, _casefold, deterministic=True)


def connect_writable(db_path: Path, timeout: float = 10) -> sqlite3.Connection:
    """Open a read-write connection with standard pragmas (seeding, tests)."""
    conn = sqlite3.connect(str(db_path), timeout=timeout)
    conn.row_factory = sqlite3.Row
    register_functions(conn)
    conn.execute(f"PRAGMA busy_timeout={int(timeout * 1000)}")
    return conn


def count_advocates(conn: sqlite3.Connection) -> int:
    """Return the number of rows in the advocates table."""
    return conn.execute(f"SELECT COUNT(*) FROM {TABLE_NAME}").fetchone()[0]


# ── Connection pool ───────────────────────────────────────────────────────────

class ConnectionPool:
    """Bounded SQLite connection pool using a queue for thread-safety.

    Entries in the queue are ``(connection, released_at)`` pairs so idle
    connections can be retired.
    """

    def __init__(
        self,
        db_path: Path,
        max_size: int = 20,
        idle_timeout: float = 20.0,
        connect_timeout: float = 10.0,
    ) -> None:
        self.db_path = Path(db_path)
        self._max_size = max_size
        self._idle_timeout = idle_timeout
        self._connect_timeout = connect_timeout
        self._pool: queue.Queue[tuple[sqlite3.Connection, float]] = queue.Queue(
            maxsize=max_size
        )
        self._active = 0
        self._lock = threading.Lock()
        self._closed = False

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def active(self) -> int:
        """Connections currently open (pooled or checked out)."""
        with self._lock:
            return self._active

    def _make_conn(self) -> sqlite3.Connection:
        """Open a new read-only connection with standard pragmas."""
        uri = f"file:{self.db_path}?mode=ro"
        conn = sqlite3.connect(uri, uri=True, check_same_thread=False,
                               timeout=self._connect_timeout)
        conn.row_factory = sqlite3.Row
        register_functions(conn)
        conn.execute(f"PRAGMA busy_timeout={int(self._connect_timeout * 1000)}")
        return conn

    def _discard(self, conn: sqlite3.Connection) -> None:
        conn.close()
        with self._lock:
            self._active -= 1

    def _open_new(self) -> sqlite3.Connection:
        try:
            return self._make_conn()
        except sqlite3.Error:
            with self._lock:
                self._active -= 1
            if not self.db_path.exists():
                logger.error(
                    "Store not found at %s. Run 'python build_advocates_db.py' to build it.",
                    self.db_path,
                )
            raise

    def acquire(self) -> sqlite3.Connection:
        """Acquire a connection from the pool (create if needed, block if full).

        Raises:
            sqlite3.OperationalError: the store file cannot be opened, or no
                connection was released within ``connect_timeout``.
        """
        while True:
            try:
                conn, released_at = self._pool.get_nowait()
            except queue.Empty:
                break
            if time.monotonic() - released_at > self._idle_timeout:
                logger.debug("Closing idle connection to %s", self.db_path)
                self._discard(conn)
                continue
            return conn

        with self._lock:
            can_open = self._active < self._max_size
            if can_open:
                self._active += 1
        if can_open:
            return self._open_new()

        try:
            conn, _ = self._pool.get(timeout=self._connect_timeout)
        except queue.Empty:
            raise sqlite3.OperationalError(
                f"No pooled connection available within {self._connect_timeout}s"
            ) from None
        return conn

    def release(self, conn: sqlite3.Connection) -> None:
        """Return a connection to the pool, or close it once the pool is closed."""
        if self._closed:
            self._discard(conn)
            return
        try:
            self._pool.put_nowait((conn, time.monotonic()))
        except queue.Full:
            self._discard(conn)
            return
        if self._closed:
            self._drain()

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Check out a connection for the duration of a with-block."""
        conn = self.acquire()
        try:
            yield conn
        finally:
            self.release(conn)

    def close_all(self) -> None:
        """Close all pooled connections (call on shutdown).

        Connections checked out at this point are closed when released.
        """
        self._closed = True
        self._drain()

    def _drain(self) -> None:
        while True:
            try:
                conn, _ = self._pool.get_nowait()
            except queue.Empty:
                break
            self._discard(conn)
