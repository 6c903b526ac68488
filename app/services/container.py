from __future__ import annotations

import logging
from dataclasses import dataclass, field

from app.config import AppConfig
from app.services.application.chart_service import ChartAggregator
from app.services.application.device_authorizer import DeviceAuthorizer
from app.services.application.export_service import ReadingExporter
from app.services.application.ingest_service import ReadingIngestor
from infrastructure.database.repositories.readings import ReadingRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler
from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Own the store and the services built on it for one application."""

    config: AppConfig
    database: SQLiteDatabaseHandler
    reading_repo: ReadingRepository
    audit_logger: AuditLogger
    device_authorizer: DeviceAuthorizer
    ingestor: ReadingIngestor
    chart_aggregator: ChartAggregator
    exporter: ReadingExporter
    _shutdown_complete: bool = field(default=False, init=False, repr=False)

    @classmethod
    def build(cls, config: AppConfig) -> "ServiceContainer":
        """Open the store, bring its schema up to date and wire services."""
        database = SQLiteDatabaseHandler(config.database_path, busy_timeout_ms=config.db_busy_timeout_ms)
        database.ensure_schema()
        logger.info("Reading store ready at %s", config.database_path)

        reading_repo = ReadingRepository(database)
        audit_logger = AuditLogger(config.audit_log_path, level=config.log_level)
        device_authorizer = DeviceAuthorizer(config.allowlist_path)
        if device_authorizer.allowlist_path.exists():
            logger.info("Device allow-list active: %s", device_authorizer.allowlist_path)
        else:
            logger.info("No device allow-list at %s; accepting all devices", device_authorizer.allowlist_path)

        return cls(
            config=config,
            database=database,
            reading_repo=reading_repo,
            audit_logger=audit_logger,
            device_authorizer=device_authorizer,
            ingestor=ReadingIngestor(reading_repo, device_authorizer, audit_logger=audit_logger),
            chart_aggregator=ChartAggregator(reading_repo),
            exporter=ReadingExporter(reading_repo),
        )

    def shutdown(self) -> None:
        """Close the calling thread's connection and flush audit handlers."""
        if self._shutdown_complete:
            return
        self._shutdown_complete = True
        try:
            self.database.close_db()
        finally:
            self.audit_logger.close()
        logger.info("Service container shut down")
