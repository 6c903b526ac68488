"""
Schemas Module
==============

Pydantic models for request/response validation.
"""

from app.schemas.chart import ChartQuery, ChartSeries

__all__ = ["ChartQuery", "ChartSeries"]
