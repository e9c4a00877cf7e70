"""Report model for anonymous incident submissions."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, CHAR
from sqlalchemy.dialects.postgresql import UUID, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column
from src.database import Base


class Report(Base):
    """An append-only anonymous report with encrypted free-text fields."""

    __tablename__ = "reports"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    incident_type: Mapped[str] = mapped_column(String(50), index=True)
    community_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    encrypted_description: Mapped[str] = mapped_column(Text)
    encrypted_evidence: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    incident_date: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    report_hash: Mapped[str] = mapped_column(CHAR(64), unique=True)
    idempotency_key: Mapped[Optional[str]] = mapped_column(
        String(255), unique=True, nullable=True
    )
    # Set by the ingest service, not the database: the same instant enters the hash.
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), index=True)

    def canonical_payload(self) -> dict[str, Optional[str]]:
        """Stored fields under the names used for hashing."""
        return {
            "incidentType": self.incident_type,
            "communityName": self.community_name,
            "encryptedDescription": self.encrypted_description,
            "encryptedEvidence": self.encrypted_evidence,
            "incidentDate": self.incident_date,
        }

    def __repr__(self):
        return f"<Report(id='{self.id}', type='{self.incident_type}', hash='{self.report_hash[:12]}')>"
