"""
Logger endpoint
===============

One URL serves three audiences, told apart by query parameters only:

- counters uploading a reading (``?ID=...&CPM=...``) get ``OK`` / ``FORBIDDEN``
- ``?export=csv|xlsx`` downloads the filtered readings
- anything else renders the viewer

Errors are turned into the bare ``ERROR`` body by the app-level handler.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, render_template, request, stream_with_context

from app.blueprints.api._common import get_container, query_params
from app.constants import BUCKET_LABELS, DEFAULT_CHART_BUCKET, DEFAULT_THEME, THEME_LABELS, ParamAliases
from app.domain.date_range import DateRange, build_predicate, date_range_from_params
from app.enums import IngestOutcome, RequestKind, Theme
from app.services.application.request_classifier import classify, export_format
from app.utils.http import ACK_FORBIDDEN, ACK_OK, ClientAddress, plain_text_response

logger_bp = Blueprint("logger", __name__)
logger = logging.getLogger(__name__)


def theme_from_params(params: dict[str, str]) -> Theme:
    """Requested theme, falling back to the default for unknown values."""
    value = (params.get(ParamAliases.THEME) or DEFAULT_THEME.value).strip().lower()
    try:
        return Theme(value)
    except ValueError:
        return DEFAULT_THEME


@logger_bp.get("/")
@logger_bp.get("/gmc_log.php")
def handle_logger_request():
    params = query_params()
    kind = classify(params)

    if kind is RequestKind.WRITE:
        return _handle_write(params)
    if kind is RequestKind.EXPORT:
        return _handle_export(params)
    return _handle_view(params)


def _handle_write(params: dict[str, str]) -> Response:
    outcome = get_container().ingestor.ingest(params, ClientAddress.from_request(request))
    if outcome is IngestOutcome.FORBIDDEN:
        return plain_text_response(ACK_FORBIDDEN, 403)
    return plain_text_response(ACK_OK)


def _handle_export(params: dict[str, str]) -> Response:
    fmt = export_format(params)
    result = get_container().exporter.export(fmt, date_range_from_params(params))
    response = Response(stream_with_context(result.chunks), mimetype=None, content_type=result.mimetype)
    response.headers["Content-Disposition"] = f'attachment; filename="{result.filename}"'
    return response


def _handle_view(params: dict[str, str]) -> str:
    container = get_container()
    date_range: DateRange = date_range_from_params(params)
    theme = theme_from_params(params)

    rows = container.reading_repo.query(build_predicate(date_range), limit=container.config.max_view_rows)
    chart_data = container.chart_aggregator.aggregate_all(date_range)
    has_chart_data = any(not series.is_empty for series in chart_data.values())

    return render_template(
        "viewer.html",
        rows=rows,
        max_rows=container.config.max_view_rows,
        total_readings=container.reading_repo.count(),
        filters=date_range.as_form_values(),
        theme=theme.value,
        themes={t.value: label for t, label in THEME_LABELS.items()},
        buckets={b.value: label for b, label in BUCKET_LABELS.items()},
        default_bucket=DEFAULT_CHART_BUCKET.value,
        chart_data={bucket.value: series.model_dump() for bucket, series in chart_data.items()},
        has_chart_data=has_chart_data,
        database_path=container.config.database_path,
    )
