"""Repository for Report model operations.

Reports are append-only: there is no update or delete here.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, cast, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.report import Report
from src.utils.logger import get_logger

log = get_logger(__name__)


class ReportRepository:
    """Repository for Report create and read operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        incident_type: str,
        encrypted_description: str,
        report_hash: str,
        created_at: datetime,
        community_name: Optional[str] = None,
        encrypted_evidence: Optional[str] = None,
        incident_date: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> Report:
        """Add a new report and flush it so the id is assigned. Caller commits."""
        report = Report(
            incident_type=incident_type,
            community_name=community_name,
            encrypted_description=encrypted_description,
            encrypted_evidence=encrypted_evidence,
            incident_date=incident_date,
            report_hash=report_hash,
            idempotency_key=idempotency_key,
            created_at=created_at,
        )
        self.session.add(report)
        await self.session.flush()
        log.debug("report_created", report_id=str(report.id), incident_type=incident_type)
        return report

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    async def get_by_hash(self, report_hash: str) -> Optional[Report]:
        result = await self.session.execute(
            select(Report).where(Report.report_hash == report_hash.lower())
        )
        return result.scalar_one_or_none()

    async def get_by_idempotency_key(self, key: str) -> Optional[Report]:
        result = await self.session.execute(select(Report).where(Report.idempotency_key == key))
        return result.scalar_one_or_none()

    async def count(
        self, since: Optional[datetime] = None, until: Optional[datetime] = None
    ) -> int:
        """Count reports created in ``[since, until)``; either bound may be omitted."""
        stmt = select(func.count()).select_from(Report)
        if since is not None:
            stmt = stmt.where(Report.created_at >= since)
        if until is not None:
            stmt = stmt.where(Report.created_at < until)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def count_by_incident_type(self) -> list[tuple[str, int]]:
        """Report counts grouped by incident type, largest first."""
        total = func.count(Report.id).label("total")
        result = await self.session.execute(
            select(Report.incident_type, total)
            .group_by(Report.incident_type)
            .order_by(total.desc(), Report.incident_type)
        )
        return [(row[0], row[1]) for row in result.fetchall()]

    async def count_by_day(self, since: datetime) -> dict[date, int]:
        """Report counts per UTC calendar day from ``since`` onward."""
        day = cast(func.timezone("UTC", Report.created_at), Date).label("day")
        result = await self.session.execute(
            select(day, func.count(Report.id))
            .where(Report.created_at >= since)
            .group_by(day)
        )
        return {row[0]: row[1] for row in result.fetchall()}
