"""
Reading Export Service

Serializes every reading that matches the viewer's date filter, newest first
and without a row cap, as CSV or as the tab-separated ``xlsx`` download.

The ``xlsx`` payload is plain tab-separated UTF-8 text served under the
spreadsheet media type. Existing spreadsheet imports and scripts depend on
those exact bytes, so it is kept that way deliberately.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Iterator, Sequence

from app.constants import (
    CSV_MIMETYPE,
    EXPORT_FILENAME_PREFIX,
    EXPORT_HEADERS,
    UTF8_BOM,
    XLSX_MIMETYPE,
)
from app.domain.date_range import DateRange, build_predicate
from app.enums import ExportFormat
from app.utils.time import file_stamp, utc_now
from infrastructure.database.repositories.base import ReadingReader

logger = logging.getLogger(__name__)

# ASCII whitespace and NUL only; str.strip() would also eat Unicode spaces
_TRIM_CHARS = " \t\n\r\0\x0b"
_LINE_BREAKERS = str.maketrans({"\t": " ", "\r": " ", "\n": " "})


@dataclass(frozen=True)
class ExportResult:
    """Attachment metadata plus the lazily produced body."""

    filename: str
    mimetype: str
    chunks: Iterator[bytes]

    def read_all(self) -> bytes:
        return b"".join(self.chunks)


def csv_chunks(rows: Iterable[Sequence[str]]) -> Iterator[bytes]:
    """UTF-8 BOM, header, then one CSV record per row."""
    yield UTF8_BOM
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(EXPORT_HEADERS)
    yield buffer.getvalue().encode("utf-8")

    for row in rows:
        buffer.seek(0)
        buffer.truncate(0)
        writer.writerow(row)
        yield buffer.getvalue().encode("utf-8")


def clean_tsv_field(value: str) -> str:
    return value.translate(_LINE_BREAKERS).strip(_TRIM_CHARS)


def tsv_chunks(rows: Iterable[Sequence[str]]) -> Iterator[bytes]:
    """UTF-8 BOM, header, then tab-joined rows with line breakers blanked."""
    yield UTF8_BOM
    yield ("\t".join(EXPORT_HEADERS) + "\n").encode("utf-8")
    for row in rows:
        yield ("\t".join(clean_tsv_field(value) for value in row) + "\n").encode("utf-8")


class ReadingExporter:
    """Builds CSV / tab-separated downloads of filtered readings."""

    def __init__(self, store: ReadingReader, *, clock: Callable[[], datetime] = utc_now) -> None:
        self.store = store
        self._clock = clock

    def export(self, fmt: ExportFormat, date_range: DateRange) -> ExportResult:
        """
        Export all readings matching *date_range*.

        Rows are fetched before this returns so storage failures surface
        before any response bytes are sent; encoding happens lazily.
        """
        readings = self.store.query(build_predicate(date_range), limit=None)
        rows = [reading.export_fields() for reading in readings]
        filename = f"{EXPORT_FILENAME_PREFIX}_{file_stamp(self._clock())}.{fmt.value}"
        logger.info("Exporting %d readings as %s", len(rows), fmt.value)

        if fmt is ExportFormat.CSV:
            return ExportResult(filename=filename, mimetype=CSV_MIMETYPE, chunks=csv_chunks(rows))
        return ExportResult(filename=filename, mimetype=XLSX_MIMETYPE, chunks=tsv_chunks(rows))
