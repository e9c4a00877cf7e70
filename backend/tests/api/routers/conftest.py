"""Shared pytest fixtures for router tests."""

import uuid
from contextlib import ExitStack
from datetime import date, datetime
from typing import Optional
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from src.models.report import Report


class InMemoryReportRepository:
    """Stand-in for ReportRepository with the same unique constraints."""

    def __init__(self):
        self.reports: list[Report] = []
        self._pending: list[Report] = []
        self.commit_error: Optional[Exception] = None

    async def create(self, **fields) -> Report:
        report = Report(id=uuid.uuid4(), **fields)
        self._pending.append(report)
        return report

    async def commit(self) -> None:
        if self.commit_error is not None:
            raise self.commit_error
        for report in self._pending:
            for column in ("report_hash", "idempotency_key"):
                value = getattr(report, column)
                if value is not None and any(getattr(r, column) == value for r in self.reports):
                    self._pending.clear()
                    raise IntegrityError("INSERT INTO reports", {}, Exception(f"duplicate {column}"))
        self.reports.extend(self._pending)
        self._pending.clear()

    async def rollback(self) -> None:
        self._pending.clear()

    async def get_by_hash(self, report_hash: str):
        return next((r for r in self.reports if r.report_hash == report_hash.lower()), None)

    async def get_by_idempotency_key(self, key: str):
        return next((r for r in self.reports if r.idempotency_key == key), None)

    async def count(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> int:
        return sum(
            1
            for r in self.reports
            if (since is None or r.created_at >= since) and (until is None or r.created_at < until)
        )

    async def count_by_incident_type(self) -> list[tuple[str, int]]:
        counts: dict[str, int] = {}
        for r in self.reports:
            counts[r.incident_type] = counts.get(r.incident_type, 0) + 1
        return sorted(counts.items(), key=lambda item: (-item[1], item[0]))

    async def count_by_day(self, since: datetime) -> dict[date, int]:
        counts: dict[date, int] = {}
        for r in self.reports:
            if r.created_at >= since:
                day = r.created_at.date()
                counts[day] = counts.get(day, 0) + 1
        return counts


@pytest.fixture(autouse=True)
def mock_database_init():
    """Keep the app lifespan away from a real database."""
    with ExitStack() as stack:
        stack.enter_context(patch("src.main.init_db", new_callable=AsyncMock))
        mock_engine = stack.enter_context(patch("src.main.engine"))
        mock_engine.dispose = AsyncMock()
        yield


@pytest.fixture
def report_repo() -> InMemoryReportRepository:
    return InMemoryReportRepository()


@pytest.fixture
def idempotency_store():
    from src.utils.idempotency import IdempotencyStore

    return IdempotencyStore(ttl_minutes=30)


@pytest.fixture
def app(report_repo, idempotency_store):
    """FastAPI app with persistence and idempotency overridden."""
    from src.main import app
    from src.dependencies import (
        get_idempotency_store,
        get_report_ingest_service_dep,
        get_report_repository,
    )
    from src.services.report_ingest_service import ReportIngestService
    from src.utils.hashing import ContentHasher

    app.dependency_overrides[get_report_repository] = lambda: report_repo
    app.dependency_overrides[get_report_ingest_service_dep] = lambda: ReportIngestService(
        report_repository=report_repo, hasher=ContentHasher()
    )
    app.dependency_overrides[get_idempotency_store] = lambda: idempotency_store

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def wire_payload(envelope):
    """Request body as the submission client sends it."""
    return {
        "incidentType": "harassment",
        "encryptedDescription": envelope("X said mean things"),
    }
