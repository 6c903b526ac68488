from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING, Iterator, Optional

from app.domain.date_range import Predicate
from app.domain.exceptions import StorageError
from app.domain.reading import Reading

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

logger = logging.getLogger(__name__)

_READING_COLUMNS = "id, timestamp, device_id, cpm, acpm, usv, dose, raw_data, client_ip"


class ReadingOperations:
    """Append and query helpers for the ``readings`` table.

    Mixed into :class:`SQLiteDatabaseHandler`, which provides ``get_db`` and
    ``connection``.
    """

    if TYPE_CHECKING:

        def get_db(self) -> sqlite3.Connection: ...

        def connection(self) -> "AbstractContextManager[sqlite3.Connection]": ...

    def insert_reading(self, reading: Reading) -> int:
        """
        Append one reading and return its new id.

        The single INSERT is committed on success and rolled back on failure,
        so a partial row is never visible.
        """
        try:
            with self.connection() as db:
                cursor = db.execute(
                    """
                    INSERT INTO readings (timestamp, device_id, cpm, acpm, usv, dose, raw_data, client_ip)
                    VALUES (:timestamp, :device_id, :cpm, :acpm, :usv, :dose, :raw_data, :client_ip)
                    """,
                    {
                        "timestamp": reading.timestamp,
                        "device_id": reading.device_id,
                        "cpm": reading.cpm,
                        "acpm": reading.acpm,
                        "usv": reading.usv,
                        "dose": reading.dose,
                        "raw_data": reading.raw_data,
                        "client_ip": reading.client_ip,
                    },
                )
                return int(cursor.lastrowid)
        except sqlite3.Error as exc:
            raise StorageError(
                f"Error inserting reading (device_id={reading.device_id}): {exc}",
                detail={"device_id": reading.device_id},
            ) from exc

    def fetch_readings(self, predicate: Predicate, limit: Optional[int] = None) -> list[Reading]:
        """
        Retrieve readings newest first (by id).

        Args:
            predicate: Filter produced by ``build_predicate``.
            limit: Row cap; ``None`` returns every matching row.
        """
        sql = f"SELECT {_READING_COLUMNS} FROM readings{predicate.where_sql()} ORDER BY id DESC"
        params = dict(predicate.params)
        if limit is not None:
            sql += " LIMIT :row_limit"
            params["row_limit"] = max(1, int(limit))
        try:
            cursor = self.get_db().execute(sql, params)
            return [Reading.from_row(row) for row in cursor.fetchall()]
        except sqlite3.Error as exc:
            raise StorageError(f"Error querying readings: {exc}") from exc

    def iter_chart_points(self, predicate: Predicate) -> Iterator[tuple[str, str, str]]:
        """Stream ``(timestamp, cpm, acpm)`` for every matching reading."""
        sql = f"SELECT timestamp, cpm, acpm FROM readings{predicate.where_sql()} ORDER BY id ASC"
        try:
            cursor = self.get_db().execute(sql, predicate.params)
            for row in cursor:
                yield str(row[0]), str(row[1]), str(row[2])
        except sqlite3.Error as exc:
            raise StorageError(f"Error reading chart points: {exc}") from exc

    def count_readings(self, predicate: Optional[Predicate] = None) -> int:
        predicate = predicate or Predicate()
        try:
            row = self.get_db().execute(
                f"SELECT COUNT(*) FROM readings{predicate.where_sql()}", predicate.params
            ).fetchone()
            return int(row[0]) if row else 0
        except sqlite3.Error as exc:
            raise StorageError(f"Error counting readings: {exc}") from exc
