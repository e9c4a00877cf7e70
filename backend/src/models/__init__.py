"""Database models."""

from src.models.report import Report

__all__ = ["Report"]
