from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass
from typing import Any

from flask import Request, Response, jsonify

from app.constants import Defaults
from app.utils.time import iso_now

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Device-facing plaintext bodies. Counters match on these exact strings.
# ---------------------------------------------------------------------------
ACK_OK = "OK"
ACK_FORBIDDEN = "FORBIDDEN"
ACK_ERROR = "ERROR"

# ---------------------------------------------------------------------------
# Generic user-facing messages; internals are never sent to clients
# ---------------------------------------------------------------------------
_GENERIC_MESSAGES: dict[int, str] = {
    400: "Invalid request",
    403: "Access denied",
    404: "Resource not found",
    500: "An internal error occurred",
}


def plain_text_response(body: str, status: int = 200) -> Response:
    return Response(body, status=status, mimetype="text/plain")


def safe_plain_error(exc: BaseException, *, context: str = "") -> Response:
    """Log *exc* for operators and answer with the bare ``ERROR`` body."""
    _log.error("GMC logger error [%s]: %s", context or "unhandled", exc, exc_info=exc)
    return plain_text_response(ACK_ERROR, 500)


def safe_error(
    exc: BaseException,
    status: int = 500,
    *,
    context: str = "",
) -> Response:
    """Return a generic JSON error response while logging the real exception.

    Parameters
    ----------
    exc:
        The caught exception: logged server-side, **never** sent to the
        client.
    status:
        HTTP status code for the response (determines the generic message).
    context:
        Optional human-readable context string logged alongside *exc*.
    """
    _log.error("API error [%s] %s: %s", status, context, exc, exc_info=exc)
    message = _GENERIC_MESSAGES.get(status, _GENERIC_MESSAGES[500])
    return error_response(message, status)


def success_response(
    data: dict | list | None = None,
    status: int = 200,
    *,
    message: str | None = None,
) -> Response:
    payload: dict[str, Any] = {"ok": True, "data": data, "error": None}
    if message is not None:
        payload["message"] = message
    response = jsonify(payload)
    response.status_code = status
    return response


def error_response(
    message: str,
    status: int = 500,
    *,
    details: dict | None = None,
) -> Response:
    payload: dict[str, Any] = {"message": message, "timestamp": iso_now()}
    if details:
        payload.update(details)
    response = jsonify({"ok": False, "data": None, "error": payload, "message": message})
    response.status_code = status
    return response


# ---------------------------------------------------------------------------
# Client address resolution
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClientAddress:
    """Raw address candidates taken from a request."""

    forwarded_for: str | None = None
    client_ip: str | None = None
    remote_addr: str | None = None

    @classmethod
    def from_request(cls, request: Request) -> "ClientAddress":
        return cls(
            forwarded_for=request.headers.get("X-Forwarded-For"),
            client_ip=request.headers.get("Client-IP"),
            remote_addr=request.remote_addr,
        )


def _is_ip(candidate: str) -> bool:
    try:
        ipaddress.ip_address(candidate)
    except ValueError:
        return False
    return True


def resolve_client_ip(address: ClientAddress) -> str:
    """Pick the first syntactically valid IP among the candidates.

    Order: first token of ``X-Forwarded-For``, then ``Client-IP``, then the
    socket peer. Nothing here is trusted; the value is informational only.
    """
    candidates: list[str] = []
    if address.forwarded_for:
        candidates.append(address.forwarded_for.split(",", 1)[0].strip())
    if address.client_ip:
        candidates.append(address.client_ip.strip())
    if address.remote_addr:
        candidates.append(address.remote_addr.strip())

    for candidate in candidates:
        if candidate and _is_ip(candidate):
            return candidate
    return Defaults.CLIENT_IP
