"""Client-side report submission: validate, encrypt, send, return a receipt."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from src.clients.ingest_client import ReportIngestClient
from src.exceptions import SubmissionError, ValidationError
from src.schemas.reports import INCIDENT_TYPES
from src.utils.cipher import SymmetricCipher
from src.utils.hashing import is_digest
from src.utils.logger import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Receipt:
    """Confirmation of a stored report."""

    report_hash: str
    report_id: str
    created_at: datetime


def _optional(value: Optional[str]) -> Optional[str]:
    """Blank form fields are treated as absent."""
    if value is None or not value.strip():
        return None
    return value


class ReportSubmissionService:
    """Encrypts sensitive report fields locally and submits them in one request."""

    def __init__(self, cipher: SymmetricCipher, ingest_client: ReportIngestClient):
        self.cipher = cipher
        self.ingest_client = ingest_client

    @staticmethod
    def validate(incident_type: Optional[str], description: Optional[str]) -> None:
        """Raise ValidationError unless the required fields are usable."""
        if not incident_type:
            raise ValidationError(message="Incident type is required")
        if incident_type not in INCIDENT_TYPES:
            raise ValidationError(
                message=f"Unknown incident type: {incident_type}",
                details={"allowed": list(INCIDENT_TYPES)},
            )
        if not isinstance(description, str) or not description.strip():
            raise ValidationError(message="Description is required")

    async def submit(
        self,
        incident_type: Optional[str],
        description: Optional[str],
        community_name: Optional[str] = None,
        evidence: Optional[str] = None,
        incident_date: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> Receipt:
        """
        Submit a report.

        Validation happens before any encryption or network call. The
        description, and the evidence when given, are each encrypted under
        their own throwaway key.

        Raises:
            ValidationError: Missing or unrecognized incident type, blank description
            EncodingError: Text could not be encoded for encryption
            CryptoUnavailableError: Encryption is not possible here
            SubmissionError: Transport or backend failure (not retried)
        """
        self.validate(incident_type, description)

        evidence = _optional(evidence)
        payload: dict[str, Any] = {
            "incidentType": incident_type,
            "communityName": _optional(community_name),
            "encryptedDescription": self.cipher.encrypt(description),
            "encryptedEvidence": self.cipher.encrypt(evidence) if evidence is not None else None,
            "incidentDate": _optional(incident_date),
        }
        payload = {k: v for k, v in payload.items() if v is not None}

        log.info(
            "submitting report",
            incident_type=incident_type,
            has_community="communityName" in payload,
            has_evidence="encryptedEvidence" in payload,
        )
        body = await self.ingest_client.submit(payload, idempotency_key=idempotency_key)
        receipt = self._parse_receipt(body)
        log.info("report submitted", report_id=receipt.report_id)
        return receipt

    @staticmethod
    def _parse_receipt(body: dict[str, Any]) -> Receipt:
        report_hash = body.get("reportHash")
        report_id = body.get("reportId")
        timestamp = body.get("timestamp")

        if not isinstance(report_hash, str) or not is_digest(report_hash):
            raise SubmissionError(message="Ingest response carried an invalid report hash")
        if not report_id:
            raise SubmissionError(message="Ingest response carried no report id")
        try:
            created_at = datetime.fromisoformat(str(timestamp).replace("Z", "+00:00"))
        except ValueError:
            raise SubmissionError(message="Ingest response carried an invalid timestamp")

        return Receipt(report_hash=report_hash.lower(), report_id=str(report_id), created_at=created_at)
