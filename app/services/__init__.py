"""
Service Organization
====================

**application/**
  Services managed by ServiceContainer, one instance per application:
  request classification, device authorization, ingestion, chart
  aggregation and export.

``container.py`` owns the store and wires the services onto it.
"""
