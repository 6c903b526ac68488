"""
Application Constants
=====================

Parameter spellings, defaults and presentation constants used by the
ingestion and query pipeline.

Usage:
    from app.constants import ParamAliases, Defaults
"""

from app.enums import ChartBucket, Theme

# =============================================================================
# Request parameters
# =============================================================================


class ParamAliases:
    """Accepted query-parameter spellings, in lookup priority order."""

    DEVICE_ID = ("ID", "id", "AID", "aid", "GID", "gid")
    CPM = ("CPM", "cpm")
    ACPM = ("ACPM", "acpm")
    USV = ("USV", "uSV", "uSv", "usv")
    DOSE = ("dose", "DOSE")

    # Exact spellings that mark a request as a write. Not case-insensitive.
    WRITE_MARKERS = frozenset({"CPM", "cpm", "ID", "id", "AID", "aid", "GID", "gid"})

    EXPORT = "export"
    THEME = "theme"
    BUCKET = "bucket"
    TIMESTAMP_FROM = "f_timestamp_from"
    TIMESTAMP_TO = "f_timestamp_to"


class Defaults:
    """Values substituted for absent telemetry fields."""

    DEVICE_ID = "UNKNOWN"
    CPM = "0"
    ACPM = "0"
    USV = "0.0"
    DOSE = "0"
    CLIENT_IP = "UNKNOWN"
    RAW_DATA = "{}"


# =============================================================================
# Storage
# =============================================================================

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"

# =============================================================================
# Viewer / chart
# =============================================================================

MAX_VIEW_ROWS = 100
MINUTE_BUCKET_WINDOW_HOURS = 24

THEME_LABELS: dict[Theme, str] = {
    Theme.LIGHT: "White",
    Theme.DARK: "Dark",
    Theme.FOREST: "Forest",
    Theme.OCEAN: "Ocean",
    Theme.SUNSET: "Sunset",
    Theme.LAVENDER: "Lavender",
    Theme.MONO: "Monochrome",
}
DEFAULT_THEME = Theme.LIGHT

# strftime patterns keyed by bucket; weekly uses the Monday-first,
# zero-based week of year (%W).
BUCKET_FORMATS: dict[ChartBucket, str] = {
    ChartBucket.MINUTE: "%Y-%m-%d %H:%M",
    ChartBucket.HOURLY: "%Y-%m-%d %H:00",
    ChartBucket.DAILY: "%Y-%m-%d",
    ChartBucket.WEEKLY: "%Y-W%W",
    ChartBucket.MONTHLY: "%Y-%m",
}

BUCKET_LABELS: dict[ChartBucket, str] = {
    ChartBucket.MINUTE: "Minute",
    ChartBucket.HOURLY: "Hourly",
    ChartBucket.DAILY: "Daily",
    ChartBucket.WEEKLY: "Weekly",
    ChartBucket.MONTHLY: "Monthly",
}
DEFAULT_CHART_BUCKET = ChartBucket.HOURLY

# =============================================================================
# Export
# =============================================================================

EXPORT_HEADERS = ("Timestamp", "DeviceID", "CPM", "ACPM", "uSv/h", "Dose", "RawData")
EXPORT_FILENAME_PREFIX = "gmc_readings"
EXPORT_FILE_STAMP_FORMAT = "%Y%m%d_%H%M%S"
UTF8_BOM = b"\xef\xbb\xbf"

CSV_MIMETYPE = "text/csv; charset=utf-8"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet; charset=utf-8"
