"""Repository facades exposing typed accessors over low-level mixins.

Protocols are available for type-checking and dependency injection::

    from infrastructure.database.repositories.base import ReadingStore
"""

from infrastructure.database.repositories.base import (
    ReadingReader,
    ReadingStore,
    ReadingWriter,
)
from infrastructure.database.repositories.readings import ReadingRepository

__all__ = [
    "ReadingReader",
    "ReadingRepository",
    "ReadingStore",
    "ReadingWriter",
]
