"""
Chart Schemas
=============

Pydantic models for the trend chart query and the series it produces.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.constants import DEFAULT_CHART_BUCKET
from app.enums import ChartBucket


class ChartSeries(BaseModel):
    """Per-bucket CPM/ACPM averages as three parallel sequences."""

    labels: list[str] = Field(default_factory=list, description="Bucket keys, oldest first")
    cpm: list[float] = Field(default_factory=list, description="Average CPM per bucket (2 dp)")
    acpm: list[float] = Field(default_factory=list, description="Average ACPM per bucket (2 dp)")

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "labels": ["2026-02-01", "2026-02-02"],
                "cpm": [18.5, 21.0],
                "acpm": [19.12, 20.4],
            }
        },
    )

    @model_validator(mode="after")
    def _check_parallel(self) -> "ChartSeries":
        if not (len(self.labels) == len(self.cpm) == len(self.acpm)):
            raise ValueError("labels, cpm and acpm must have equal length")
        return self

    @property
    def is_empty(self) -> bool:
        return not self.labels


class ChartQuery(BaseModel):
    """Query parameters accepted by the chart API."""

    bucket: ChartBucket = Field(default=DEFAULT_CHART_BUCKET, description="Aggregation window")
    f_timestamp_from: str | None = Field(default=None, description="YYYY-MM-DD, inclusive")
    f_timestamp_to: str | None = Field(default=None, description="YYYY-MM-DD, inclusive")

    @field_validator("bucket", mode="before")
    def _coerce_bucket(cls, v):
        """Accept any casing/whitespace of a bucket name."""
        if v is None or v == "":
            return DEFAULT_CHART_BUCKET
        if isinstance(v, ChartBucket):
            return v
        if isinstance(v, str):
            try:
                return ChartBucket(v.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"Unsupported chart bucket '{v}'")
