"""Outbound HTTP clients."""

from src.clients.ingest_client import ReportIngestClient

__all__ = ["ReportIngestClient"]
