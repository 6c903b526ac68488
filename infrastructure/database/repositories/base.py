"""
Base Repository Protocol
========================

Contracts the services depend on instead of the concrete SQLite handler, so
tests can hand a service a fake store and the persistence layer can be
swapped without touching service code.

Usage in service type hints::

    from infrastructure.database.repositories.base import ReadingStore


    class MyService:
        def __init__(self, store: ReadingStore) -> None: ...
"""

from __future__ import annotations

from typing import Iterator, Optional, Protocol, runtime_checkable

from app.domain.date_range import Predicate
from app.domain.reading import Reading


@runtime_checkable
class ReadingWriter(Protocol):
    """Store that can append a reading."""

    def insert(self, reading: Reading) -> int:
        """Persist *reading* and return its generated id.

        Raises ``StorageError`` on failure.
        """
        ...


@runtime_checkable
class ReadingReader(Protocol):
    """Store that can answer filtered queries."""

    def query(self, predicate: Predicate, *, limit: Optional[int] = None) -> list[Reading]:
        """Matching readings, newest id first; unlimited when *limit* is None."""
        ...

    def chart_points(self, predicate: Predicate) -> Iterator[tuple[str, str, str]]:
        """Stream ``(timestamp, cpm, acpm)`` of matching readings."""
        ...


@runtime_checkable
class ReadingStore(ReadingWriter, ReadingReader, Protocol):
    """Convenience union of the read and write contracts."""


__all__ = [
    "ReadingReader",
    "ReadingStore",
    "ReadingWriter",
]
