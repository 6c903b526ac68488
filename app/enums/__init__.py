"""
Enums Module
============

Enumeration types for the GMC logger.
"""

from app.enums.common import (
    ChartBucket,
    ExportFormat,
    IngestOutcome,
    RequestKind,
    Theme,
)

__all__ = [
    "ChartBucket",
    "ExportFormat",
    "IngestOutcome",
    "RequestKind",
    "Theme",
]
