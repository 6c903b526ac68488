"""
Migration 001: Add client_ip column to readings.

Tables created before the client address was recorded lack the column. The
default keeps every existing row valid without a rewrite.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

logger = logging.getLogger(__name__)

MIGRATION_ID = 1
MIGRATION_NAME = "add_client_ip_to_readings"


def migrate(db_handler: "SQLiteDatabaseHandler") -> bool:
    """Add client_ip column to readings if missing."""
    try:
        if "client_ip" in db_handler.table_columns("readings"):
            logger.info("client_ip column already exists in readings")
            return True

        logger.info("Adding 'client_ip' column to readings table")
        with db_handler.connection() as db:
            db.execute("ALTER TABLE readings ADD COLUMN client_ip TEXT NOT NULL DEFAULT ''")
        logger.info("Migration %s completed successfully", MIGRATION_NAME)
        return True
    except sqlite3.Error as exc:
        logger.error("Migration %s failed: %s", MIGRATION_NAME, exc, exc_info=True)
        return False
