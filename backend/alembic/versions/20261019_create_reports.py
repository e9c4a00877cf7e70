"""Create append-only reports table.

Revision ID: 001_create_reports
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_create_reports"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create reports table."""
    op.create_table(
        "reports",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("incident_type", sa.String(50), nullable=False),
        sa.Column("community_name", sa.Text, nullable=True),
        sa.Column("encrypted_description", sa.Text, nullable=False),
        sa.Column("encrypted_evidence", sa.Text, nullable=True),
        sa.Column("incident_date", sa.String(32), nullable=True),
        sa.Column("report_hash", sa.CHAR(64), nullable=False),
        sa.Column("idempotency_key", sa.String(255), nullable=True),
        sa.Column("created_at", postgresql.TIMESTAMP(timezone=True), nullable=False),
        sa.UniqueConstraint("report_hash", name="uq_reports_report_hash"),
        sa.UniqueConstraint("idempotency_key", name="uq_reports_idempotency_key"),
    )
    op.create_index("ix_reports_incident_type", "reports", ["incident_type"])
    op.create_index("ix_reports_created_at", "reports", ["created_at"])


def downgrade() -> None:
    """Drop reports table."""
    op.drop_index("ix_reports_created_at", table_name="reports")
    op.drop_index("ix_reports_incident_type", table_name="reports")
    op.drop_table("reports")
