from __future__ import annotations

from typing import Iterator, Optional

from app.domain.date_range import Predicate
from app.domain.reading import Reading
from infrastructure.database.ops.readings import ReadingOperations


class ReadingRepository:
    """Expose reading persistence to the application services."""

    def __init__(self, backend: ReadingOperations) -> None:
        self._backend = backend

    def insert(self, reading: Reading) -> int:
        return self._backend.insert_reading(reading)

    def query(self, predicate: Predicate, *, limit: Optional[int] = None) -> list[Reading]:
        return self._backend.fetch_readings(predicate, limit=limit)

    def chart_points(self, predicate: Predicate) -> Iterator[tuple[str, str, str]]:
        return self._backend.iter_chart_points(predicate)

    def count(self, predicate: Optional[Predicate] = None) -> int:
        return self._backend.count_readings(predicate)
