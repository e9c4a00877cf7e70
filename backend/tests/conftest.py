"""Shared pytest fixtures."""

# Clear settings cache before any imports to prevent stale values with coverage
from src.config import get_settings

get_settings.cache_clear()

import uuid
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock


@pytest.fixture
def mock_async_session():
    """Create a mock AsyncSession for repository tests."""
    session = AsyncMock()

    mock_result = Mock()
    mock_result.scalar_one_or_none = Mock(return_value=None)
    mock_result.scalar_one = Mock(return_value=0)
    mock_result.fetchall = Mock(return_value=[])

    session.execute = AsyncMock(return_value=mock_result)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.add = Mock()

    return session


@pytest.fixture
def fixed_now():
    """A fixed, timezone-aware ingest instant."""
    return datetime(2026, 10, 19, 12, 30, 45, 123456, tzinfo=timezone.utc)


@pytest.fixture
def envelope():
    """Factory for real cipher envelopes."""
    from src.utils.cipher import SymmetricCipher

    cipher = SymmetricCipher()

    def _make(text: str = "something happened") -> str:
        return cipher.encrypt(text)

    return _make


@pytest.fixture
def sample_payload(envelope):
    """camelCase wire payload with only the required fields set."""
    return {
        "incidentType": "harassment",
        "communityName": None,
        "encryptedDescription": envelope(),
        "encryptedEvidence": None,
        "incidentDate": None,
    }


@pytest.fixture
def sample_report(fixed_now, envelope):
    """Mock stored Report with fields consistent with ContentHasher."""
    from src.utils.hashing import ContentHasher

    report = Mock()
    report.id = uuid.uuid4()
    report.incident_type = "harassment"
    report.community_name = "Riverside High"
    report.encrypted_description = envelope()
    report.encrypted_evidence = None
    report.incident_date = "2026-10-01"
    report.created_at = fixed_now
    report.canonical_payload = Mock(
        return_value={
            "incidentType": report.incident_type,
            "communityName": report.community_name,
            "encryptedDescription": report.encrypted_description,
            "encryptedEvidence": report.encrypted_evidence,
            "incidentDate": report.incident_date,
        }
    )
    report.report_hash = ContentHasher().digest(report.canonical_payload(), fixed_now)
    report.idempotency_key = None
    return report
