"""Centralized exception hierarchy for the GMC logger.

All failures raised by the core inherit from :class:`GmcLoggerError` so the
application-level error handler can catch a single base class, while callers
that care can still match on specific subclasses.

Hierarchy
---------
::

    GmcLoggerError (base: maps to 500)
    ├── ValidationError   (400: bad input on the JSON API)
    ├── ConfigError       (500: allow-list present but unreadable)
    └── StorageError      (500: schema, insert or query failure)

Unparseable date filters, unknown themes and non-numeric telemetry are *not*
errors; they are defaulted where they are read.
"""

from __future__ import annotations


class GmcLoggerError(Exception):
    """Base exception for all GMC logger errors.

    Parameters
    ----------
    message:
        Human-readable description (logged server-side, never sent to
        devices or browsers).
    detail:
        Optional machine-readable context dict for structured logging.
    """

    http_status: int = 500

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


class ValidationError(GmcLoggerError):
    """Caller supplied input the JSON API cannot interpret (HTTP 400)."""

    http_status: int = 400


class ConfigError(GmcLoggerError):
    """External configuration exists but cannot be used (HTTP 500)."""

    http_status: int = 500


class StorageError(GmcLoggerError):
    """Database / persistence layer failure (HTTP 500)."""

    http_status: int = 500
