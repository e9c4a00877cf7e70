"""Schemas for report submission, verification and statistics.

Wire names are camelCase to match the browser client; Python attributes are
snake_case.
"""

from datetime import datetime
from typing import Literal, Optional, get_args
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.utils.cipher import parse_envelope

IncidentType = Literal["cyberbullying", "sextortion", "harassment", "unsafe-behavior", "other"]
INCIDENT_TYPES: tuple[str, ...] = get_args(IncidentType)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReportIngestRequest(CamelModel):
    """Encrypted report as sent by the submission client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    incident_type: IncidentType = Field(..., description="Incident category")
    community_name: Optional[str] = Field(None, max_length=500, description="Free-text community label")
    encrypted_description: str = Field(..., min_length=1, description="Cipher envelope of the description")
    encrypted_evidence: Optional[str] = Field(None, description="Cipher envelope of the evidence")
    incident_date: Optional[str] = Field(None, max_length=32, description="Incident date as entered")

    @field_validator("community_name", "incident_date")
    @classmethod
    def no_nul_characters(cls, v: Optional[str]) -> Optional[str]:
        """PostgreSQL text columns cannot hold NUL."""
        if v is not None and "\x00" in v:
            raise ValueError("must not contain NUL characters")
        return v

    @field_validator("encrypted_description", "encrypted_evidence")
    @classmethod
    def must_be_envelope(cls, v: Optional[str]) -> Optional[str]:
        """Reject anything that is not a cipher envelope so plaintext is never stored."""
        if v is not None:
            parse_envelope(v)
        return v

    def canonical_payload(self) -> dict[str, Optional[str]]:
        return self.model_dump(by_alias=True)


class SubmitReportResponse(CamelModel):
    """Receipt returned by the ingest endpoint."""

    success: Literal[True] = True
    report_hash: str = Field(..., description="SHA-256 hex digest of the canonical report")
    report_id: str = Field(..., description="Server-assigned report ID")
    timestamp: str = Field(..., description="Ingest time, ISO-8601 UTC")


class ReportVerificationResponse(CamelModel):
    """Result of recomputing a stored report's hash."""

    verified: bool = Field(..., description="Whether the stored fields still match the hash")
    report_hash: str
    report_id: UUID
    incident_type: str
    timestamp: str


class IncidentTypeCount(BaseModel):
    type: str
    count: int


class DailyCount(BaseModel):
    date: str = Field(..., description="UTC day, YYYY-MM-DD")
    count: int


class TransparencyStatistics(CamelModel):
    """Public aggregate figures. Never includes report content."""

    total_reports: int
    reports_this_month: int
    reports_last_month: int
    trend_percentage: Optional[float] = Field(
        None, description="Month-over-month change, null when last month had no reports"
    )
    incident_breakdown: list[IncidentTypeCount]
    recent_trend: list[DailyCount]
    generated_at: datetime
