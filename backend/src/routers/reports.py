"""Report ingest, verification and transparency router."""

from fastapi import APIRouter

from src.dependencies import IdempotencyKey, IdempotencyStoreDep, ReportIngestServiceDep
from src.exceptions import IdempotencyConflictError
from src.schemas.reports import (
    ReportIngestRequest,
    ReportVerificationResponse,
    SubmitReportResponse,
    TransparencyStatistics,
)
from src.utils.logger import get_logger

log = get_logger(__name__)

router = APIRouter()


@router.post("/submit-report", response_model=SubmitReportResponse)
async def submit_report(
    request: ReportIngestRequest,
    service: ReportIngestServiceDep,
    store: IdempotencyStoreDep,
    idempotency_key: IdempotencyKey,
) -> SubmitReportResponse:
    """
    Store an encrypted report and return its tamper-evident receipt.

    Without an Idempotency-Key every call creates a new report, even for
    identical content.
    """
    if idempotency_key is None:
        return await service.ingest(request)

    existing = await store.acquire(idempotency_key)
    if existing is not None:
        if existing.status == "completed":
            log.info("idempotent replay from memory")
            return existing.response
        raise IdempotencyConflictError()

    try:
        receipt = await service.ingest(request, idempotency_key=idempotency_key)
    except Exception:
        await store.release(idempotency_key)
        raise

    await store.complete(idempotency_key, receipt)
    return receipt


@router.get("/reports/statistics", response_model=TransparencyStatistics)
async def report_statistics(service: ReportIngestServiceDep) -> TransparencyStatistics:
    """Public aggregate counts: totals, month-over-month trend, type breakdown, last days."""
    return await service.statistics()


@router.get("/reports/verify/{report_hash}", response_model=ReportVerificationResponse)
async def verify_report(report_hash: str, service: ReportIngestServiceDep) -> ReportVerificationResponse:
    """Check that the stored report behind a receipt hash is unaltered."""
    return await service.verify(report_hash)
