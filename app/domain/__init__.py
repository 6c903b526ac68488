"""Domain value objects for the GMC logger."""

from app.domain.date_range import DateRange, Predicate, build_predicate, parse_date_range
from app.domain.reading import Reading

__all__ = ["DateRange", "Predicate", "Reading", "build_predicate", "parse_date_range"]
