"""Server-side ingestion, verification and statistics for anonymous reports."""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from src.exceptions import BadRequestError, PersistenceError, ResourceNotFoundError
from src.repositories.report_repository import ReportRepository
from src.schemas.reports import (
    DailyCount,
    IncidentTypeCount,
    ReportIngestRequest,
    ReportVerificationResponse,
    SubmitReportResponse,
    TransparencyStatistics,
)
from src.utils.hashing import ContentHasher, format_timestamp, is_digest
from src.utils.logger import get_logger

log = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _month_start(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class ReportIngestService:
    """Stamps, hashes and persists encrypted reports."""

    def __init__(
        self,
        report_repository: ReportRepository,
        hasher: ContentHasher,
        clock: Callable[[], datetime] = utc_now,
        trend_days: int = 7,
    ):
        self.report_repository = report_repository
        self.hasher = hasher
        self.clock = clock
        self.trend_days = trend_days

    async def ingest(
        self, request: ReportIngestRequest, idempotency_key: Optional[str] = None
    ) -> SubmitReportResponse:
        """
        Persist a report and return its receipt.

        The hash covers the received fields plus ``created_at`` and is computed
        exactly once, here.

        A unique-constraint failure on ``idempotency_key`` replays the stored
        receipt instead of failing.

        Raises:
            SerializationError: If the payload cannot be canonicalized
            PersistenceError: If the record cannot be committed
        """
        log.info(
            "report received",
            incident_type=request.incident_type,
            has_community=bool(request.community_name),
            has_evidence=bool(request.encrypted_evidence),
            has_idempotency_key=idempotency_key is not None,
        )

        created_at = self.clock()
        report_hash = self.hasher.digest(request.canonical_payload(), created_at)

        try:
            report = await self.report_repository.create(
                incident_type=request.incident_type,
                community_name=request.community_name,
                encrypted_description=request.encrypted_description,
                encrypted_evidence=request.encrypted_evidence,
                incident_date=request.incident_date,
                report_hash=report_hash,
                idempotency_key=idempotency_key,
                created_at=created_at,
            )
            await self.report_repository.commit()
        except IntegrityError as e:
            await self.report_repository.rollback()
            if idempotency_key is not None:
                existing = await self.report_repository.get_by_idempotency_key(idempotency_key)
                if existing is not None:
                    log.info("idempotent replay from storage", report_id=str(existing.id))
                    return self._receipt(existing.report_hash, str(existing.id), existing.created_at)
            log.error("report insert rejected", error_type=type(e).__name__)
            raise PersistenceError(message="Report could not be stored")
        except SQLAlchemyError as e:
            await self.report_repository.rollback()
            log.error("report insert failed", error_type=type(e).__name__)
            raise PersistenceError(message="Report could not be stored")

        log.info("report stored", report_id=str(report.id), report_hash=report_hash)
        return self._receipt(report_hash, str(report.id), created_at)

    async def verify(self, report_hash: str) -> ReportVerificationResponse:
        """Recompute the hash of a stored report from its persisted fields."""
        if not is_digest(report_hash):
            raise BadRequestError(
                message="Report hash must be 64 hexadecimal characters",
                details={"length": len(report_hash)},
            )

        report = await self.report_repository.get_by_hash(report_hash)
        if report is None:
            raise ResourceNotFoundError("Report", report_hash.lower())

        verified = self.hasher.verify(
            report.canonical_payload(), report.created_at, report.report_hash
        )
        if not verified:
            log.warning("report hash mismatch", report_id=str(report.id))

        return ReportVerificationResponse(
            verified=verified,
            report_hash=report.report_hash,
            report_id=report.id,
            incident_type=report.incident_type,
            timestamp=format_timestamp(report.created_at),
        )

    async def statistics(self) -> TransparencyStatistics:
        """Aggregate public counts for the transparency page."""
        now = self.clock()
        this_month = _month_start(now)
        last_month = _month_start(this_month - timedelta(days=1))
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        trend_start = today - timedelta(days=self.trend_days - 1)

        total = await self.report_repository.count()
        this_month_count = await self.report_repository.count(since=this_month)
        last_month_count = await self.report_repository.count(since=last_month, until=this_month)
        breakdown = await self.report_repository.count_by_incident_type()
        per_day = await self.report_repository.count_by_day(since=trend_start)

        trend_percentage = None
        if last_month_count:
            trend_percentage = round(
                (this_month_count - last_month_count) / last_month_count * 100, 1
            )

        recent_trend = []
        for offset in range(self.trend_days):
            day = (trend_start + timedelta(days=offset)).date()
            recent_trend.append(DailyCount(date=day.isoformat(), count=per_day.get(day, 0)))

        return TransparencyStatistics(
            total_reports=total,
            reports_this_month=this_month_count,
            reports_last_month=last_month_count,
            trend_percentage=trend_percentage,
            incident_breakdown=[IncidentTypeCount(type=t, count=c) for t, c in breakdown],
            recent_trend=recent_trend,
            generated_at=now,
        )

    @staticmethod
    def _receipt(report_hash: str, report_id: str, created_at: datetime) -> SubmitReportResponse:
        return SubmitReportResponse(
            report_hash=report_hash,
            report_id=report_id,
            timestamp=format_timestamp(created_at),
        )
