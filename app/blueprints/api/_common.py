"""
Blueprint Common Utilities
==========================

Shared helper functions for the logger and API blueprints.

Usage:
    from app.blueprints.api._common import (
        get_container, query_params, success,
    )
"""
from __future__ import annotations

import logging

from flask import current_app, request

from app.utils.http import success_response

logger = logging.getLogger("api._common")

# ============================================================================
# CONTAINER ACCESS
# ============================================================================


def get_container():
    """
    Get the service container from Flask app config.

    Returns:
        ServiceContainer: The application service container

    Raises:
        RuntimeError: If container is not configured
    """
    container = current_app.config.get("CONTAINER")
    if not container:
        raise RuntimeError("ServiceContainer not found in app config")
    return container


# ============================================================================
# REQUEST HELPERS
# ============================================================================


def query_params() -> dict[str, str]:
    """Query parameters as a plain dict; the first value wins for repeated keys."""
    return request.args.to_dict(flat=True)


# ============================================================================
# RESPONSE HELPERS
# ============================================================================


def success(data: dict | list | None = None, status: int = 200, *, message: str | None = None):
    """Flask Response with format: {"ok": true, "data": ..., "error": null}"""
    return success_response(data, status, message=message)

