"""
Chart Aggregation Service

Buckets filtered readings into fixed time windows and averages CPM and ACPM
per window for the trend chart.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable

from app.constants import BUCKET_FORMATS, MINUTE_BUCKET_WINDOW_HOURS
from app.domain.date_range import DateRange, Predicate, build_predicate
from app.enums import ChartBucket
from app.schemas.chart import ChartSeries
from app.utils.time import parse_sqlite_timestamp, sqlite_timestamp, utc_now
from infrastructure.database.repositories.base import ReadingReader

logger = logging.getLogger(__name__)

_TWO_PLACES = Decimal("0.01")

# Longest leading real literal, the prefix SQLite keeps for CAST(x AS REAL)
_LEADING_REAL = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


def coerce_number(value: str) -> float:
    """Numeric value of device text.

    Only the leading number counts (``"15 cpm"`` is 15, ``"1,5"`` is 1); text
    without one, and values that overflow to infinity, count as zero.
    """
    match = _LEADING_REAL.match(str(value))
    if match is None:
        return 0.0
    number = float(match.group(1))
    return number if math.isfinite(number) else 0.0


def round_half_up(value: float) -> float:
    """Round to two decimals with halves away from zero (1.005 -> 1.01)."""
    return float(Decimal(repr(value)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def bucket_key(moment: datetime, bucket: ChartBucket) -> str:
    return moment.strftime(BUCKET_FORMATS[bucket])


@dataclass
class _BucketAccumulator:
    first_timestamp: str
    count: int = 0
    cpm_total: float = 0.0
    acpm_total: float = 0.0

    def add(self, timestamp: str, cpm: float, acpm: float) -> None:
        if timestamp < self.first_timestamp:
            self.first_timestamp = timestamp
        self.count += 1
        self.cpm_total += cpm
        self.acpm_total += acpm


class ChartAggregator:
    """Computes per-bucket CPM/ACPM averages over a date range."""

    def __init__(self, store: ReadingReader, *, clock: Callable[[], datetime] = utc_now) -> None:
        self.store = store
        self._clock = clock

    def effective_predicate(self, date_range: DateRange, bucket: ChartBucket) -> Predicate:
        """Filter actually applied for *bucket*.

        When no filter text was sent at all the minute chart is limited to the
        trailing 24 hours. A filter that was sent but did not parse leaves the
        chart unlimited, like the other buckets.
        """
        predicate = build_predicate(date_range)
        if bucket is ChartBucket.MINUTE and not date_range.requested:
            since = self._clock() - timedelta(hours=MINUTE_BUCKET_WINDOW_HOURS)
            predicate = predicate.also("timestamp >= :timestamp_limit", {"timestamp_limit": sqlite_timestamp(since)})
        return predicate

    def aggregate(self, date_range: DateRange, bucket: ChartBucket) -> ChartSeries:
        """
        Group matching readings by *bucket* and average each group.

        Groups are ordered by the earliest timestamp they contain rather than
        by label, since ``YYYY-Wnn`` labels do not sort correctly across a
        year boundary.
        """
        groups: dict[str, _BucketAccumulator] = {}

        for timestamp, cpm, acpm in self.store.chart_points(self.effective_predicate(date_range, bucket)):
            moment = parse_sqlite_timestamp(timestamp)
            if moment is None:
                logger.debug("Skipping reading with unparseable timestamp %r", timestamp)
                continue
            key = bucket_key(moment, bucket)
            group = groups.get(key)
            if group is None:
                group = groups[key] = _BucketAccumulator(first_timestamp=timestamp)
            group.add(timestamp, coerce_number(cpm), coerce_number(acpm))

        ordered = sorted(groups.items(), key=lambda item: item[1].first_timestamp)
        return ChartSeries(
            labels=[key for key, _ in ordered],
            cpm=[round_half_up(group.cpm_total / group.count) for _, group in ordered],
            acpm=[round_half_up(group.acpm_total / group.count) for _, group in ordered],
        )

    def aggregate_all(self, date_range: DateRange) -> dict[ChartBucket, ChartSeries]:
        """Series for every bucket, as embedded in the viewer page."""
        return {bucket: self.aggregate(date_range, bucket) for bucket in ChartBucket}
