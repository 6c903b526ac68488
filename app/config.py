"""
Configuration for the GMC Logger
================================
Runtime settings loaded from environment variables, plus the logging setup
shared by the server entry points.
"""

import logging
import os
import sys
from contextlib import suppress
from dataclasses import dataclass, field
from logging.handlers import RotatingFileHandler
from typing import Any

from app.constants import MAX_VIEW_ROWS


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("GMC_ENV", "development"))
    DEBUG: bool = field(default_factory=lambda: _env_bool("GMC_DEBUG", False))

    # Storage
    database_path: str = field(
        default_factory=lambda: os.getenv("GMC_DATABASE_PATH", "gmc_logs/gmc_readings.sqlite")
    )
    db_busy_timeout_ms: int = field(default_factory=lambda: _env_int("GMC_DB_BUSY_TIMEOUT_MS", 5000))

    # Ingestion
    allowlist_path: str = field(default_factory=lambda: os.getenv("GMC_ALLOWLIST_PATH", "whitelist.txt"))

    # Viewer
    max_view_rows: int = field(default_factory=lambda: _env_int("GMC_MAX_VIEW_ROWS", MAX_VIEW_ROWS))

    # Logging
    log_dir: str = field(default_factory=lambda: os.getenv("GMC_LOG_DIR", "logs"))
    log_level: str = field(default_factory=lambda: os.getenv("GMC_LOG_LEVEL", "INFO"))
    audit_log_path: str = field(
        default_factory=lambda: os.getenv("GMC_AUDIT_LOG_PATH", "logs/ingest_audit.log")
    )

    # Server
    host: str = field(default_factory=lambda: os.getenv("GMC_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("GMC_PORT", 8000))

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_view_rows < 1:
            raise ValueError("GMC_MAX_VIEW_ROWS must be a positive integer.")
        if self.db_busy_timeout_ms < 0:
            raise ValueError("GMC_DB_BUSY_TIMEOUT_MS must not be negative.")

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for Flask application."""
        return {
            "ENV": self.environment,
            "DEBUG": self.DEBUG,
            "DATABASE_PATH": self.database_path,
            "ALLOWLIST_PATH": self.allowlist_path,
            "MAX_VIEW_ROWS": self.max_view_rows,
            "AUDIT_LOG_PATH": self.audit_log_path,
        }


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_HANDLER_NAME = "gmc_console"
FILE_HANDLER_NAME = "gmc_file"


def _console_handler() -> logging.Handler:
    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    return logging.StreamHandler(stream=stream)


def _file_handler(log_dir: str) -> logging.Handler:
    os.makedirs(log_dir, exist_ok=True)
    return RotatingFileHandler(
        os.path.join(log_dir, "gmc_logger.log"),
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )


def setup_logging(debug: bool = False, log_dir: str = "logs", level: str = "INFO") -> None:
    """Attach the console and rotating-file handlers to the root logger.

    Handlers are identified by name, so repeated calls (one per
    ``create_app``) only adjust levels instead of stacking duplicates. The
    file handler keeps the directory it was first created with.
    """
    log_level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(log_level)

    factories = {
        CONSOLE_HANDLER_NAME: _console_handler,
        FILE_HANDLER_NAME: lambda: _file_handler(log_dir),
    }
    installed = {handler.name: handler for handler in root.handlers if handler.name in factories}
    missing = [name for name in factories if name not in installed]

    formatter = logging.Formatter(LOG_FORMAT)
    for name in missing:
        handler = factories[name]()
        handler.name = name
        handler.setFormatter(formatter)
        root.addHandler(handler)
        installed[name] = handler

    for handler in installed.values():
        handler.setLevel(log_level)

    if missing:
        root.info("Logging initialized at level %s (%s)", logging.getLevelName(log_level), ", ".join(missing))

    # Counters report every minute; per-request access lines drown the log
    if _env_bool("GMC_SILENCE_WERKZEUG", True):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)


def load_config() -> AppConfig:
    """Helper for callers to load and validate configuration."""
    return AppConfig()
