from __future__ import annotations

import atexit
import contextlib
import logging
import signal
import threading
from pathlib import Path
from typing import Any

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from app.blueprints.api.chart import chart_api
from app.blueprints.logger import logger_bp
from app.config import load_config, setup_logging


def create_app(config_overrides: dict[str, Any] | None = None, *, install_process_hooks: bool = False) -> Flask:
    """Build the logger app.

    ``install_process_hooks`` registers atexit and SIGINT/SIGTERM shutdown for
    the serving process. Apps built by tests or embedding code leave process
    hooks alone and are shut down by their owner (``CONTAINER.shutdown()``).
    """
    config = load_config()
    if config_overrides:
        for key, value in config_overrides.items():
            setattr(config, key if hasattr(config, key) else key.lower(), value)

    # Configure logging early so schema migrations are visible in gmc_logger.log.
    setup_logging(debug=config.DEBUG, log_dir=config.log_dir, level=config.log_level)

    flask_app = Flask(__name__, template_folder=str(Path(__file__).resolve().parent / "templates"))
    flask_app.config.update(config.as_flask_config())

    from app.services.container import ServiceContainer

    container = ServiceContainer.build(config)
    flask_app.config["CONTAINER"] = container

    # Request threads each open their own connection; close it when the request ends.
    flask_app.teardown_appcontext(container.database.close_db)

    # ── Graceful shutdown handlers ──────────────────────────────────
    _shutdown_lock = threading.Lock()
    _shutdown_done = False

    def _graceful_shutdown(reason: str = "unknown") -> None:
        nonlocal _shutdown_done
        with _shutdown_lock:
            if _shutdown_done:
                return
            _shutdown_done = True
        logging.info("Graceful shutdown initiated (%s)", reason)
        try:
            container.shutdown()
        except Exception as exc:
            logging.warning("Error during graceful shutdown: %s", exc)

    def _signal_handler(signum: int, _frame: object) -> None:
        sig_name = signal.Signals(signum).name
        logging.info("Received %s, shutting down", sig_name)
        _graceful_shutdown(sig_name)
        raise SystemExit(0)

    if install_process_hooks:
        atexit.register(_graceful_shutdown, "atexit")
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(OSError, ValueError):
                signal.signal(sig, _signal_handler)

    # Counters only understand the bare "ERROR" body; the JSON API keeps its envelope.
    @flask_app.errorhandler(Exception)
    def _handle_unhandled(exc):
        from app.domain.exceptions import GmcLoggerError
        from app.utils.http import error_response, safe_error, safe_plain_error

        if not request.path.startswith("/api/"):
            if isinstance(exc, HTTPException):
                return exc
            return safe_plain_error(exc, context=request.path)

        if isinstance(exc, HTTPException):
            status = int(exc.code or 500)
            if status >= 500:
                return safe_error(exc, status, context="http-exception")
            return error_response(exc.description or "Request failed", status)

        if isinstance(exc, GmcLoggerError):
            status = exc.http_status
            if status >= 500:
                return safe_error(exc, status, context=type(exc).__name__)
            return error_response(str(exc) or "Request failed", status, details=exc.detail or None)

        return safe_error(exc, 500, context="unhandled")

    V1 = "/api/v1"

    # Devices keep uploading to the legacy script path, so logger_bp answers on both.
    flask_app.register_blueprint(logger_bp)
    flask_app.register_blueprint(chart_api, url_prefix=f"{V1}/chart")

    for bp_name in flask_app.blueprints:
        logging.info("Registered blueprint: %s", bp_name)

    logger = logging.getLogger(__name__)
    logger.info("GMC logger initialized (database: %s)", config.database_path)

    return flask_app


__all__ = ["create_app"]
