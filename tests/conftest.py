"""
Shared test fixtures for the GMC logger test suite.

Provides:
- In-memory SQLite database with the readings table created
- Repository instance wired to the test database
- A fixed clock so timestamps are predictable
- Flask app / client built on temp-dir storage
- Helper for seeding readings with explicit timestamps

Usage:
    def test_example(reading_repo, seed):
        seed.insert_reading("2026-02-01 10:00:00", cpm="20")
        assert reading_repo.count() == 1
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from app.domain.reading import Reading
from infrastructure.database.repositories.readings import ReadingRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

# ---------------------------------------------------------------------------
# Logging: keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("infrastructure").setLevel(logging.WARNING)
logging.getLogger("app").setLevel(logging.WARNING)

FIXED_NOW = datetime(2026, 2, 20, 12, 30, 45, tzinfo=timezone.utc)


# ========================== Database Fixtures ==============================


@pytest.fixture()
def db_handler():
    """In-memory SQLite database with schema and migrations applied.

    Each test gets a fresh database.
    """
    handler = SQLiteDatabaseHandler(":memory:")
    handler.ensure_schema()
    yield handler
    handler.close_db()


@pytest.fixture()
def reading_repo(db_handler):
    """ReadingRepository backed by the in-memory DB."""
    return ReadingRepository(db_handler)


@pytest.fixture()
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture()
def mock_audit_logger():
    """Mock AuditLogger."""
    logger = MagicMock()
    logger.log_event = MagicMock()
    return logger


# ========================== Seed Data Helpers ==============================


class SeedData:
    """Helper to insert readings with chosen timestamps.

    Usage in tests::

        def test_something(seed):
            seed.insert_reading("2026-02-01 10:00:00", cpm="20", acpm="18")
    """

    def __init__(self, repo: ReadingRepository):
        self._repo = repo

    def insert_reading(
        self,
        timestamp: str,
        *,
        device_id: str = "GMC-500",
        cpm: str = "20",
        acpm: str = "20",
        usv: str = "0.13",
        dose: str = "1.2",
        raw_data: str = "{}",
        client_ip: str = "127.0.0.1",
    ) -> int:
        """Insert one reading and return its ID."""
        return self._repo.insert(
            Reading(
                timestamp=timestamp,
                device_id=device_id,
                cpm=cpm,
                acpm=acpm,
                usv=usv,
                dose=dose,
                raw_data=raw_data,
                client_ip=client_ip,
            )
        )


@pytest.fixture()
def seed(reading_repo):
    return SeedData(reading_repo)


# ========================== Application Fixtures ===========================


@pytest.fixture()
def app_paths(tmp_path):
    return {
        "database_path": str(tmp_path / "gmc_logs" / "gmc_readings.sqlite"),
        "allowlist_path": str(tmp_path / "whitelist.txt"),
        "audit_log_path": str(tmp_path / "logs" / "ingest_audit.log"),
        "log_dir": str(tmp_path / "logs"),
    }


@pytest.fixture()
def app(app_paths):
    from app import create_app

    flask_app = create_app(app_paths)
    flask_app.config["TESTING"] = True
    yield flask_app
    flask_app.config["CONTAINER"].shutdown()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def container(app):
    return app.config["CONTAINER"]
