"""
Migration 002: Index readings by timestamp.

Date-range filters and the trailing-24h minute chart scan ``timestamp``;
without an index every view walks the whole table.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

logger = logging.getLogger(__name__)

MIGRATION_ID = 2
MIGRATION_NAME = "add_readings_timestamp_index"


def migrate(db_handler: "SQLiteDatabaseHandler") -> bool:
    try:
        with db_handler.connection() as db:
            logger.info("Creating index idx_readings_timestamp...")
            db.execute("CREATE INDEX IF NOT EXISTS idx_readings_timestamp ON readings(timestamp)")
        return True
    except sqlite3.Error as exc:
        logger.error("Migration %s failed: %s", MIGRATION_NAME, exc)
        return False
