"""
Common Enumerations
====================

Enums shared by the request pipeline, the chart aggregator and the exporter.
"""

from enum import Enum


class RequestKind(str, Enum):
    """
    What an inbound logger request asks for.
    Used by: request_classifier, logger routes
    """
    WRITE = "write"
    EXPORT = "export"
    VIEW = "view"

    def __str__(self) -> str:
        return self.value


class IngestOutcome(str, Enum):
    """
    Result of a single ingestion call.
    Used by: ingest_service, logger routes
    """
    ACCEPTED = "accepted"
    FORBIDDEN = "forbidden"

    def __str__(self) -> str:
        return self.value


class ExportFormat(str, Enum):
    """
    Export payload formats.
    XLSX is tab-separated text served under the spreadsheet media type.
    """
    CSV = "csv"
    XLSX = "xlsx"

    def __str__(self) -> str:
        return self.value


class ChartBucket(str, Enum):
    """
    Time windows used to group readings for the trend chart.
    Used by: chart_service, chart API, viewer
    """
    MINUTE = "minute"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    def __str__(self) -> str:
        return self.value


class Theme(str, Enum):
    """Viewer colour themes."""
    LIGHT = "light"
    DARK = "dark"
    FOREST = "forest"
    OCEAN = "ocean"
    SUNSET = "sunset"
    LAVENDER = "lavender"
    MONO = "mono"

    def __str__(self) -> str:
        return self.value
