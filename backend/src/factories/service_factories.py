"""Factory functions for business logic services."""

from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession

from src.config import get_settings
from src.factories.client_factories import get_ingest_client
from src.repositories.report_repository import ReportRepository
from src.services.report_ingest_service import ReportIngestService
from src.services.submission_service import ReportSubmissionService
from src.utils.cipher import SymmetricCipher
from src.utils.hashing import ContentHasher
from src.utils.idempotency import IdempotencyStore


@lru_cache(maxsize=1)
def get_cipher() -> SymmetricCipher:
    """Create singleton cipher. It holds no key material between calls."""
    return SymmetricCipher()


@lru_cache(maxsize=1)
def get_hasher() -> ContentHasher:
    """Create singleton content hasher."""
    return ContentHasher()


@lru_cache(maxsize=1)
def get_idempotency_store() -> IdempotencyStore:
    """Create the process-wide idempotency store."""
    return IdempotencyStore(ttl_minutes=get_settings().idempotency_ttl_minutes)


def get_report_ingest_service(db_session: AsyncSession) -> ReportIngestService:
    """
    Create ReportIngestService with dependencies.

    Note: Not cached because depends on request-scoped db session.

    Args:
        db_session: Database session

    Returns:
        ReportIngestService instance
    """
    settings = get_settings()
    return ReportIngestService(
        report_repository=ReportRepository(db_session),
        hasher=get_hasher(),
        trend_days=settings.statistics_trend_days,
    )


def get_submission_service() -> ReportSubmissionService:
    """Create the client-side submission service from settings."""
    return ReportSubmissionService(cipher=get_cipher(), ingest_client=get_ingest_client())
