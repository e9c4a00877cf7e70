"""Tamper-evident content hashing for ingested reports."""

import hashlib
import hmac
import json
import re
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from src.exceptions import SerializationError

# Field order of the canonical serialization. Absent optional fields are
# written as null so that "absent" and "present" hash differently.
CANONICAL_FIELDS = (
    "incidentType",
    "communityName",
    "encryptedDescription",
    "encryptedEvidence",
    "incidentDate",
)

DIGEST_HEX_LENGTH = 64
_DIGEST_RE = re.compile(r"[0-9a-fA-F]{64}")


def format_timestamp(moment: datetime) -> str:
    """Render a datetime as UTC ISO-8601 with microsecond precision and a Z suffix.

    Microseconds match what PostgreSQL stores, so a stored ``created_at``
    reproduces the hashed timestamp exactly.
    """
    if moment.tzinfo is None:
        raise SerializationError(message="Timestamp must be timezone-aware")
    moment = moment.astimezone(timezone.utc)
    return moment.replace(tzinfo=None).isoformat(timespec="microseconds") + "Z"


class ContentHasher:
    """Computes SHA-256 digests over the canonical JSON form of a report."""

    def canonicalize(self, payload: Mapping[str, Any], timestamp: datetime) -> str:
        """
        Build the canonical JSON string for a report payload.

        Args:
            payload: Mapping with camelCase report fields
            timestamp: Ingest instant included in the hash

        Raises:
            SerializationError: If a field is not a string or None
        """
        record: dict[str, Optional[str]] = {}
        for name in CANONICAL_FIELDS:
            value = payload.get(name)
            if value is not None and not isinstance(value, str):
                raise SerializationError(
                    message=f"Field '{name}' cannot be canonically serialized",
                    details={"field": name, "type": type(value).__name__},
                )
            record[name] = value
        record["timestamp"] = format_timestamp(timestamp)

        try:
            return json.dumps(record, ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise SerializationError(message=f"Report serialization failed: {e}")

    def digest(self, payload: Mapping[str, Any], timestamp: datetime) -> str:
        """Return the lowercase 64-char SHA-256 hex digest of the canonical payload."""
        canonical = self.canonicalize(payload, timestamp)
        try:
            data = canonical.encode("utf-8")
        except UnicodeEncodeError as e:
            raise SerializationError(message=f"Report is not UTF-8 encodable: {e.reason}")
        return hashlib.sha256(data).hexdigest()

    def verify(self, payload: Mapping[str, Any], timestamp: datetime, expected_hash: str) -> bool:
        """Recompute the digest and compare it to ``expected_hash`` in constant time."""
        return hmac.compare_digest(self.digest(payload, timestamp), expected_hash.lower())


def is_digest(value: str) -> bool:
    """Check whether a string looks like a hex digest produced by ContentHasher."""
    return _DIGEST_RE.fullmatch(value) is not None
