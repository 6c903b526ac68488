"""
Reading Ingestion Service

Turns one counter upload (query parameters plus the caller's address) into a
persisted :class:`Reading`. Missing telemetry is defaulted instead of
rejected: counters in the field send whatever subset of fields their
firmware knows about, and a reading with a defaulted field beats a lost one.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Callable, Mapping, Optional, Sequence

from app.constants import Defaults, ParamAliases
from app.domain.reading import Reading
from app.enums import IngestOutcome
from app.services.application.device_authorizer import DeviceAuthorizer
from app.utils.http import ClientAddress, resolve_client_ip
from app.utils.time import sqlite_timestamp, utc_now
from infrastructure.database.repositories.base import ReadingWriter
from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


def read_param(params: Mapping[str, str], keys: Sequence[str], default: str) -> str:
    """First non-blank value among *keys* (trimmed), else *default*."""
    for key in keys:
        value = params.get(key)
        if value is None:
            continue
        value = str(value).strip()
        if value:
            return value
    return default


def serialize_params(params: Mapping[str, str]) -> str:
    """Compact JSON snapshot of the request parameters for audit/replay."""
    if not params:
        return Defaults.RAW_DATA
    return json.dumps(dict(params), ensure_ascii=False, separators=(",", ":"))


class ReadingIngestor:
    """Extracts, defaults and stores one reading per accepted request."""

    def __init__(
        self,
        store: ReadingWriter,
        authorizer: DeviceAuthorizer,
        *,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.authorizer = authorizer
        self.audit_logger = audit_logger
        self._clock = clock

    def build_reading(self, params: Mapping[str, str], client_address: ClientAddress) -> Reading:
        """Assemble the row to insert; timestamp is the receipt time, never the device's."""
        return Reading(
            timestamp=sqlite_timestamp(self._clock()),
            device_id=read_param(params, ParamAliases.DEVICE_ID, Defaults.DEVICE_ID),
            cpm=read_param(params, ParamAliases.CPM, Defaults.CPM),
            acpm=read_param(params, ParamAliases.ACPM, Defaults.ACPM),
            usv=read_param(params, ParamAliases.USV, Defaults.USV),
            dose=read_param(params, ParamAliases.DOSE, Defaults.DOSE),
            raw_data=serialize_params(params),
            client_ip=resolve_client_ip(client_address),
        )

    def ingest(self, params: Mapping[str, str], client_address: ClientAddress) -> IngestOutcome:
        """
        Store one reading unless the device is not allow-listed.

        Returns:
            ``ACCEPTED`` after exactly one row was written, ``FORBIDDEN`` when
            the allow-list rejected the device (nothing written).

        Raises:
            ConfigError: allow-list file present but unreadable.
            StorageError: the insert failed.
        """
        reading = self.build_reading(params, client_address)

        if not self.authorizer.is_allowed(reading.device_id):
            logger.info("Rejected reading from device %r (%s)", reading.device_id, reading.client_ip)
            self._audit(reading, IngestOutcome.FORBIDDEN)
            return IngestOutcome.FORBIDDEN

        reading_id = self.store.insert(reading)
        logger.debug("Stored reading %s from device %r", reading_id, reading.device_id)
        self._audit(reading.with_id(reading_id), IngestOutcome.ACCEPTED)
        return IngestOutcome.ACCEPTED

    def _audit(self, reading: Reading, outcome: IngestOutcome) -> None:
        if self.audit_logger is None:
            return
        self.audit_logger.log_event(
            actor=reading.device_id,
            action="ingest",
            resource="readings",
            outcome=outcome.value,
            client_ip=reading.client_ip,
            reading_id=reading.id,
            timestamp=reading.timestamp,
        )
