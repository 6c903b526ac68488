"""WSGI entry point for the GMC radiation logger.

``app`` is what a WSGI server loads (``gunicorn gmc_logger_app:app``);
``main`` runs the Werkzeug development server for a single-host install.
"""
from __future__ import annotations

import logging

from app import create_app
from app.config import load_config

app = create_app(install_process_hooks=True)


def main() -> int:
    config = load_config()

    logging.info("Starting GMC logger on %s:%s", config.host, config.port)

    try:
        app.run(host=config.host, port=config.port, debug=config.DEBUG, use_reloader=False, threaded=True)
        logging.info("Server stopped.")
        return 0
    except KeyboardInterrupt:
        logging.info("Server stopped by user.")
        return 0
    except Exception as exc:  # pragma: no cover - top-level runtime errors
        logging.exception("ERROR: Failed to start server: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
