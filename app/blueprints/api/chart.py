"""
Chart API
=========

JSON access to the trend series the viewer embeds, for dashboards and
scripts that want the aggregates without scraping HTML.

Routes:
- GET /api/v1/chart?bucket=daily&f_timestamp_from=2026-02-01&f_timestamp_to=2026-02-20
"""

from __future__ import annotations

import logging

from flask import Blueprint
from pydantic import ValidationError as SchemaValidationError

from app.blueprints.api._common import get_container, query_params, success
from app.domain.date_range import parse_date_range
from app.domain.exceptions import ValidationError
from app.schemas.chart import ChartQuery

logger = logging.getLogger(__name__)

chart_api = Blueprint("chart_api", __name__)


@chart_api.get("")
def get_chart_series():
    """
    Aggregated CPM/ACPM series for one bucket.

    Query params:
    - bucket: minute | hourly | daily | weekly | monthly (default hourly)
    - f_timestamp_from / f_timestamp_to: YYYY-MM-DD, inclusive; malformed
      values are ignored
    """
    try:
        query = ChartQuery.model_validate(query_params())
    except SchemaValidationError as ve:
        raise ValidationError(
            "Invalid chart query",
            detail={"errors": ve.errors(include_url=False, include_context=False)},
        ) from ve

    date_range = parse_date_range(query.f_timestamp_from, query.f_timestamp_to)
    series = get_container().chart_aggregator.aggregate(date_range, query.bucket)
    return success(
        {
            "bucket": query.bucket.value,
            "filters": date_range.as_form_values(),
            "series": series.model_dump(),
        }
    )
