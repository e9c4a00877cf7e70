"""Tests for the report ingest, verify and statistics endpoints."""

import re
import uuid
from datetime import datetime

from sqlalchemy.exc import OperationalError

HEX64 = re.compile(r"^[0-9a-f]{64}$")


class TestSubmitReport:
    """Tests for POST /api/v1/submit-report."""

    def test_success_shape(self, client, wire_payload, report_repo):
        response = client.post("/api/v1/submit-report", json=wire_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert HEX64.match(data["reportHash"])
        assert uuid.UUID(data["reportId"])
        assert datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))
        assert len(report_repo.reports) == 1

    def test_stores_ciphertext_verbatim(self, client, wire_payload, report_repo, envelope):
        wire_payload["encryptedEvidence"] = envelope("screenshot notes")
        wire_payload["communityName"] = "Riverside High"
        wire_payload["incidentDate"] = "2026-10-01"

        client.post("/api/v1/submit-report", json=wire_payload)

        stored = report_repo.reports[0]
        assert stored.encrypted_description == wire_payload["encryptedDescription"]
        assert stored.encrypted_evidence == wire_payload["encryptedEvidence"]
        assert stored.community_name == "Riverside High"
        assert stored.incident_date == "2026-10-01"

    def test_identical_submissions_create_distinct_records(self, client, wire_payload, report_repo):
        first = client.post("/api/v1/submit-report", json=wire_payload).json()
        second = client.post("/api/v1/submit-report", json=wire_payload).json()

        assert first["reportHash"] != second["reportHash"]
        assert first["reportId"] != second["reportId"]
        assert len(report_repo.reports) == 2

    def test_missing_description_is_bad_request(self, client, report_repo):
        response = client.post("/api/v1/submit-report", json={"incidentType": "harassment"})

        assert response.status_code == 400
        body = response.json()
        assert isinstance(body["error"], str)
        assert body["code"] == "BAD_REQUEST"
        assert report_repo.reports == []

    def test_missing_incident_type_is_bad_request(self, client, wire_payload):
        del wire_payload["incidentType"]
        response = client.post("/api/v1/submit-report", json=wire_payload)
        assert response.status_code == 400

    def test_unknown_incident_type_is_bad_request(self, client, wire_payload):
        wire_payload["incidentType"] = "spam"
        response = client.post("/api/v1/submit-report", json=wire_payload)
        assert response.status_code == 400

    def test_plaintext_description_rejected(self, client, wire_payload, report_repo):
        wire_payload["encryptedDescription"] = "X said mean things"

        response = client.post("/api/v1/submit-report", json=wire_payload)

        assert response.status_code == 400
        assert "X said mean things" not in response.text
        assert report_repo.reports == []

    def test_nul_in_plain_fields_is_bad_request(self, client, wire_payload, report_repo):
        for field in ("communityName", "incidentDate"):
            response = client.post(
                "/api/v1/submit-report", json={**wire_payload, field: "Riverside\x00High"}
            )

            assert response.status_code == 400
            assert response.json()["code"] == "BAD_REQUEST"
        assert report_repo.reports == []

    def test_persistence_failure_is_server_error(self, client, wire_payload, report_repo):
        report_repo.commit_error = OperationalError("INSERT", {}, Exception("db down"))

        response = client.post("/api/v1/submit-report", json=wire_payload)

        assert response.status_code == 500
        assert response.json()["code"] == "PERSISTENCE_ERROR"
        assert response.json()["error"] == "Report could not be stored"

    def test_error_carries_request_id(self, client):
        response = client.post(
            "/api/v1/submit-report", json={}, headers={"X-Request-ID": "req-abc"}
        )

        assert response.status_code == 400
        assert response.json()["request_id"] == "req-abc"
        assert response.headers["X-Request-ID"] == "req-abc"


class TestIdempotency:
    def test_repeated_key_returns_same_receipt(self, client, wire_payload, report_repo):
        headers = {"Idempotency-Key": "retry-1"}

        first = client.post("/api/v1/submit-report", json=wire_payload, headers=headers)
        second = client.post("/api/v1/submit-report", json=wire_payload, headers=headers)

        assert first.status_code == second.status_code == 200
        assert first.json() == second.json()
        assert len(report_repo.reports) == 1

    def test_key_stored_with_report(self, client, wire_payload, report_repo):
        client.post("/api/v1/submit-report", json=wire_payload, headers={"Idempotency-Key": "k-9"})
        assert report_repo.reports[0].idempotency_key == "k-9"

    def test_failed_attempt_releases_key(self, client, wire_payload, report_repo):
        headers = {"Idempotency-Key": "retry-2"}
        report_repo.commit_error = OperationalError("INSERT", {}, Exception("db down"))
        assert client.post("/api/v1/submit-report", json=wire_payload, headers=headers).status_code == 500

        report_repo.commit_error = None
        response = client.post("/api/v1/submit-report", json=wire_payload, headers=headers)

        assert response.status_code == 200
        assert len(report_repo.reports) == 1

    def test_replay_from_storage_after_restart(
        self, client, wire_payload, report_repo, idempotency_store
    ):
        headers = {"Idempotency-Key": "retry-3"}
        first = client.post("/api/v1/submit-report", json=wire_payload, headers=headers).json()
        idempotency_store.clear()

        second = client.post("/api/v1/submit-report", json=wire_payload, headers=headers).json()

        assert second["reportId"] == first["reportId"]
        assert second["reportHash"] == first["reportHash"]
        assert len(report_repo.reports) == 1

    def test_oversized_key_rejected(self, client, wire_payload):
        response = client.post(
            "/api/v1/submit-report", json=wire_payload, headers={"Idempotency-Key": "k" * 300}
        )
        assert response.status_code == 400


class TestPreflight:
    """Tests for OPTIONS /api/v1/submit-report."""

    def test_bare_options_succeeds(self, client, report_repo):
        response = client.options("/api/v1/submit-report")

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert report_repo.reports == []

    def test_browser_preflight_succeeds(self, client):
        response = client.options(
            "/api/v1/submit-report",
            headers={
                "Origin": "https://app.example.test",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type, apikey",
            },
        )
        assert response.status_code == 200

    def test_options_ignores_body(self, client, report_repo):
        response = client.request("OPTIONS", "/api/v1/submit-report", content=b"not json at all")

        assert response.status_code == 200
        assert report_repo.reports == []


class TestVerifyReport:
    """Tests for GET /api/v1/reports/verify/{report_hash}."""

    def test_verifies_stored_report(self, client, wire_payload):
        receipt = client.post("/api/v1/submit-report", json=wire_payload).json()

        response = client.get(f"/api/v1/reports/verify/{receipt['reportHash']}")

        assert response.status_code == 200
        data = response.json()
        assert data["verified"] is True
        assert data["reportId"] == receipt["reportId"]
        assert data["timestamp"] == receipt["timestamp"]
        assert data["incidentType"] == "harassment"

    def test_detects_tampering(self, client, wire_payload, report_repo):
        receipt = client.post("/api/v1/submit-report", json=wire_payload).json()
        report_repo.reports[0].community_name = "edited later"

        data = client.get(f"/api/v1/reports/verify/{receipt['reportHash']}").json()

        assert data["verified"] is False

    def test_unknown_hash_is_not_found(self, client):
        response = client.get(f"/api/v1/reports/verify/{'d' * 64}")
        assert response.status_code == 404

    def test_malformed_hash_is_bad_request(self, client):
        response = client.get("/api/v1/reports/verify/not-a-hash")
        assert response.status_code == 400


class TestStatistics:
    """Tests for GET /api/v1/reports/statistics."""

    def test_empty(self, client):
        response = client.get("/api/v1/reports/statistics")

        assert response.status_code == 200
        data = response.json()
        assert data["totalReports"] == 0
        assert data["trendPercentage"] is None
        assert data["incidentBreakdown"] == []
        assert len(data["recentTrend"]) == 7

    def test_counts_submissions(self, client, wire_payload):
        client.post("/api/v1/submit-report", json=wire_payload)
        client.post("/api/v1/submit-report", json=wire_payload)
        client.post("/api/v1/submit-report", json={**wire_payload, "incidentType": "other"})

        data = client.get("/api/v1/reports/statistics").json()

        assert data["totalReports"] == 3
        assert data["reportsThisMonth"] == 3
        assert data["incidentBreakdown"] == [
            {"type": "harassment", "count": 2},
            {"type": "other", "count": 1},
        ]
        assert data["recentTrend"][-1]["count"] == 3

    def test_contains_no_report_content(self, client, wire_payload):
        client.post("/api/v1/submit-report", json=wire_payload)

        text = client.get("/api/v1/reports/statistics").text

        assert wire_payload["encryptedDescription"] not in text
