"""Repository layer for data access."""

from src.repositories.report_repository import ReportRepository

__all__ = ["ReportRepository"]
