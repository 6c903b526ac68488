"""
Request classification for the logger endpoint.

Counters, export links and browsers all hit the same URL; the query
parameters alone decide which path a request takes. Classification never
touches storage.
"""

from __future__ import annotations

from typing import Mapping, Optional

from app.constants import ParamAliases
from app.enums import ExportFormat, RequestKind


def is_write_request(params: Mapping[str, str]) -> bool:
    """True when any exact write-marker spelling is present.

    Presence is enough; ``?id=`` with an empty value still counts. Only the
    enumerated spellings match, so ``Cpm`` or ``Id`` do not.
    """
    return any(key in params for key in ParamAliases.WRITE_MARKERS)


def export_format(params: Mapping[str, str]) -> Optional[ExportFormat]:
    """Export format requested via ``export=``, if recognised."""
    value = (params.get(ParamAliases.EXPORT) or "").strip().lower()
    try:
        return ExportFormat(value)
    except ValueError:
        return None


def classify(params: Mapping[str, str]) -> RequestKind:
    """Decide whether *params* describe a write, an export or a view."""
    if is_write_request(params):
        return RequestKind.WRITE
    if export_format(params) is not None:
        return RequestKind.EXPORT
    return RequestKind.VIEW
