"""FastAPI dependency injection providers."""

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db
from src.exceptions import BadRequestError
from src.factories.service_factories import (
    get_cipher,
    get_idempotency_store,
    get_report_ingest_service,
)
from src.repositories.report_repository import ReportRepository
from src.services.report_ingest_service import ReportIngestService
from src.utils.cipher import SymmetricCipher
from src.utils.idempotency import MAX_KEY_LENGTH, IdempotencyStore


# Type aliases for cleaner router signatures
DbSession = Annotated[AsyncSession, Depends(get_db)]

CipherDep = Annotated[SymmetricCipher, Depends(get_cipher)]
IdempotencyStoreDep = Annotated[IdempotencyStore, Depends(get_idempotency_store)]


def get_report_repository(db: DbSession) -> ReportRepository:
    """Get ReportRepository with database session."""
    return ReportRepository(db)


def get_report_ingest_service_dep(db: DbSession) -> ReportIngestService:
    """Get ReportIngestService with database session."""
    return get_report_ingest_service(db)


ReportRepoDep = Annotated[ReportRepository, Depends(get_report_repository)]
ReportIngestServiceDep = Annotated[ReportIngestService, Depends(get_report_ingest_service_dep)]


def get_idempotency_key(
    idempotency_key: Annotated[str | None, Header(alias="Idempotency-Key")] = None,
) -> str | None:
    """Read and sanity-check the optional Idempotency-Key header."""
    if idempotency_key is None:
        return None
    key = idempotency_key.strip()
    if not key or len(key) > MAX_KEY_LENGTH:
        raise BadRequestError(
            message=f"Idempotency-Key must be 1-{MAX_KEY_LENGTH} characters",
        )
    return key


IdempotencyKey = Annotated[str | None, Depends(get_idempotency_key)]
