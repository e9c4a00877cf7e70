"""Tests for client and service factory functions."""

from unittest.mock import patch

import pytest

from src.config import Settings
from src.factories.client_factories import get_ingest_client
from src.factories.service_factories import (
    get_cipher,
    get_hasher,
    get_idempotency_store,
    get_submission_service,
)


@pytest.fixture(autouse=True)
def clear_factory_caches():
    for factory in (get_ingest_client, get_cipher, get_hasher, get_idempotency_store):
        factory.cache_clear()
    yield
    for factory in (get_ingest_client, get_cipher, get_hasher, get_idempotency_store):
        factory.cache_clear()


class TestGetIngestClient:
    def test_wired_from_settings(self):
        settings = Settings(
            ingest_endpoint_url="https://reports.example.test/api/v1/submit-report",
            ingest_api_key="anon-key",
            submission_timeout_seconds=5.0,
        )

        with patch("src.factories.client_factories.get_settings", return_value=settings):
            client = get_ingest_client()

        assert client.endpoint_url == "https://reports.example.test/api/v1/submit-report"
        assert client.api_key == "anon-key"
        assert client.timeout == 5.0

    def test_singleton(self):
        assert get_ingest_client() is get_ingest_client()


class TestServiceFactories:
    def test_submission_service_uses_shared_cipher(self):
        service = get_submission_service()
        assert service.cipher is get_cipher()
        assert service.ingest_client is get_ingest_client()

    def test_idempotency_ttl_from_settings(self):
        settings = Settings(idempotency_ttl_minutes=5)

        with patch("src.factories.service_factories.get_settings", return_value=settings):
            store = get_idempotency_store()

        assert store._ttl.total_seconds() == 300
