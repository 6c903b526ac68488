from __future__ import annotations

import importlib.util
import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from app.domain.exceptions import StorageError
from infrastructure.database.ops.readings import ReadingOperations

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


class SQLiteDatabaseHandler(ReadingOperations):
    """Thread-safe SQLite handler decoupled from Flask globals.

    Each thread lazily opens its own connection; ``close_db`` drops it so
    the next call reopens. Concurrent inserts are serialized by SQLite's own
    file locking.
    """

    def __init__(self, database_path: str, *, busy_timeout_ms: int = 5000) -> None:
        self._database_path = database_path
        self._busy_timeout_ms = busy_timeout_ms
        self._local = threading.local()

        # Ensure the directory for the database file exists
        if database_path != ":memory:":
            db_path = Path(database_path)
            if not db_path.parent.exists():
                db_path.parent.mkdir(parents=True, exist_ok=True)
                logger.info("Created database directory: %s", db_path.parent)

    @property
    def database_path(self) -> str:
        return self._database_path

    # --- Lifecycle ------------------------------------------------------------
    def ensure_schema(self) -> None:
        """Create the readings table and apply pending migrations.

        Safe to call on every process start.
        """
        self.create_tables()
        self.run_migrations()

    def get_db(self) -> sqlite3.Connection:
        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is None:
            try:
                connection = self._open_connection()
            except sqlite3.Error as exc:
                raise StorageError(f"Cannot open database {self._database_path}: {exc}") from exc
            self._local.connection = connection
        return connection

    def _open_connection(self) -> sqlite3.Connection:
        connection = sqlite3.connect(
            self._database_path,
            timeout=self._busy_timeout_ms / 1000,
            check_same_thread=False,
        )
        try:
            connection.row_factory = sqlite3.Row
            self._configure_connection(connection)
            return connection
        except Exception:
            connection.close()
            raise

    def _configure_connection(self, connection: sqlite3.Connection) -> None:
        """Configure SQLite connection for many small appends.

        - WAL mode: readers do not block the writer
        - NORMAL synchronous: safe with WAL, fewer fsyncs per insert
        - busy_timeout: wait for a concurrent writer instead of failing
        """
        connection.execute("PRAGMA journal_mode=WAL")
        connection.execute("PRAGMA synchronous=NORMAL")
        connection.execute(f"PRAGMA busy_timeout={int(self._busy_timeout_ms)}")
        connection.commit()

    def close_db(self, _e: Optional[BaseException] = None) -> None:
        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is not None:
            connection.close()
            delattr(self._local, "connection")

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Yield the thread's connection; commit on success, roll back on error."""
        conn = self.get_db()
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        else:
            conn.commit()

    # --- Schema ----------------------------------------------------------------
    def create_tables(self) -> None:
        """Creates the readings table if it does not already exist.

        The column list is always the current full set; older files are
        brought forward by the numbered migrations.
        """
        try:
            with self.connection() as db:
                db.execute(
                    """
                    CREATE TABLE IF NOT EXISTS readings (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        timestamp TEXT NOT NULL,
                        device_id TEXT NOT NULL,
                        cpm TEXT NOT NULL,
                        acpm TEXT NOT NULL,
                        usv TEXT NOT NULL,
                        dose TEXT NOT NULL,
                        raw_data TEXT NOT NULL,
                        client_ip TEXT NOT NULL DEFAULT ''
                    )
                    """
                )
                db.execute("CREATE TABLE IF NOT EXISTS Migrations (migration_id INTEGER PRIMARY KEY)")
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to create readings table: {exc}") from exc

    def applied_migrations(self) -> set[int]:
        try:
            cursor = self.get_db().execute("SELECT migration_id FROM Migrations")
            return {row[0] for row in cursor.fetchall()}
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot read applied migrations: {exc}") from exc

    def run_migrations(self) -> None:
        """Run numbered migrations (``NNN_name.py``) in ascending order.

        Each migration checks the live schema before changing it, so a
        re-run after a crash between ``migrate`` and the bookkeeping insert
        is harmless.
        """
        applied = self.applied_migrations()

        for migration_file in discover_migrations():
            m_id = int(migration_file.name.split("_")[0])
            if m_id in applied:
                continue

            logger.info("Running migration %s...", migration_file.name)
            spec = importlib.util.spec_from_file_location(
                f"gmc_migration_{migration_file.stem}", str(migration_file)
            )
            if not spec or not spec.loader:
                raise StorageError(f"Cannot load migration {migration_file.name}")
            mod = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(mod)

            if not mod.migrate(self):
                raise StorageError(f"Migration {migration_file.name} failed")
            try:
                with self.connection() as db:
                    db.execute("INSERT INTO Migrations (migration_id) VALUES (?)", (m_id,))
            except sqlite3.Error as exc:
                raise StorageError(f"Cannot record migration {migration_file.name}: {exc}") from exc
            logger.info("Migration %s successful", migration_file.name)

    def table_columns(self, table: str) -> set[str]:
        """Column names of *table* as reported by the live schema."""
        cursor = self.get_db().execute(f"PRAGMA table_info({table})")
        return {row[1] for row in cursor.fetchall()}


def discover_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> list[Path]:
    """Migration modules sorted by their numeric prefix."""
    if not migrations_dir.exists():
        return []
    return sorted(
        (f for f in migrations_dir.glob("*.py") if f.name[0].isdigit() and "_" in f.name),
        key=lambda f: int(f.name.split("_")[0]),
    )
