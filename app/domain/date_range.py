"""
Date Range Filter
=================

Turns the viewer's ``f_timestamp_from`` / ``f_timestamp_to`` parameters into
a parameterized SQL predicate over ``readings.timestamp``.

Parsing is lenient: a blank or malformed side is treated as absent rather
than rejected, so a bad bookmark still shows data.

Usage::

    date_range = parse_date_range("2026-02-01", "2026-02-20")
    predicate = build_predicate(date_range)
    db.execute(f"SELECT * FROM readings{predicate.where_sql()}", predicate.params)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping

from app.constants import DATE_FORMAT, ParamAliases


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-date range; either side may be open.

    ``requested`` records whether the caller sent any non-blank filter text,
    even text that failed to parse and left both sides open.
    """

    start: date | None = None
    end: date | None = None
    requested: bool = False

    @property
    def lower_bound(self) -> str | None:
        if self.start is None:
            return None
        return f"{self.start.strftime(DATE_FORMAT)} 00:00:00"

    @property
    def upper_bound(self) -> str | None:
        if self.end is None:
            return None
        return f"{self.end.strftime(DATE_FORMAT)} 23:59:59"

    def as_form_values(self) -> dict[str, str]:
        """Normalized values for re-populating the filter form."""
        return {
            "timestamp_from": self.start.strftime(DATE_FORMAT) if self.start else "",
            "timestamp_to": self.end.strftime(DATE_FORMAT) if self.end else "",
        }


@dataclass(frozen=True)
class Predicate:
    """A WHERE condition and its named bind parameters."""

    clause: str = ""
    params: dict[str, Any] = field(default_factory=dict)

    def also(self, clause: str, params: Mapping[str, Any]) -> "Predicate":
        """Return a new predicate with *clause* ANDed onto this one."""
        combined = f"{self.clause} AND {clause}" if self.clause else clause
        return Predicate(combined, {**self.params, **params})

    def where_sql(self) -> str:
        """`` WHERE ...`` fragment, or an empty string for no filtering."""
        return f" WHERE {self.clause}" if self.clause else ""


def _parse_date(value: str | None) -> date | None:
    text = (value or "").strip()
    if not text:
        return None
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        return None


def parse_date_range(from_text: str | None = None, to_text: str | None = None) -> DateRange:
    """Parse both sides of the filter; unparseable sides become open."""
    return DateRange(
        start=_parse_date(from_text),
        end=_parse_date(to_text),
        requested=bool((from_text or "").strip() or (to_text or "").strip()),
    )


def date_range_from_params(params: Mapping[str, str]) -> DateRange:
    return parse_date_range(
        params.get(ParamAliases.TIMESTAMP_FROM),
        params.get(ParamAliases.TIMESTAMP_TO),
    )


def build_predicate(date_range: DateRange) -> Predicate:
    """Build the bound-parameter condition for *date_range*.

    Bounds are compared as ``YYYY-MM-DD HH:MM:SS`` text, which orders the
    same way as the instants it encodes.
    """
    predicate = Predicate()
    if date_range.lower_bound is not None:
        predicate = predicate.also(
            "timestamp >= :f_timestamp_from",
            {"f_timestamp_from": date_range.lower_bound},
        )
    if date_range.upper_bound is not None:
        predicate = predicate.also(
            "timestamp <= :f_timestamp_to",
            {"f_timestamp_to": date_range.upper_bound},
        )
    return predicate
