"""Factory functions for outbound clients."""

from functools import lru_cache

from src.config import get_settings
from src.clients.ingest_client import ReportIngestClient


@lru_cache(maxsize=1)
def get_ingest_client() -> ReportIngestClient:
    """
    Create singleton ingest endpoint client.

    Returns:
        ReportIngestClient configured from settings
    """
    settings = get_settings()
    return ReportIngestClient(
        endpoint_url=settings.ingest_endpoint_url,
        api_key=settings.ingest_api_key,
        timeout=settings.submission_timeout_seconds,
    )
