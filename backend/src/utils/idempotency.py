"""Idempotency keys for report submissions.

Submissions are not idempotent by default: every request creates a new record.
A client that wants exactly-once behaviour sends an ``Idempotency-Key`` header;
repeats of a key within the TTL replay the stored receipt instead of inserting
again. The ``reports.idempotency_key`` unique constraint backs this up across
instances.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Literal, Optional

from src.utils.logger import get_logger

log = get_logger(__name__)

MAX_KEY_LENGTH = 255

EntryStatus = Literal["in_progress", "completed"]


@dataclass
class IdempotencyEntry:
    """An in-flight or completed submission."""

    key: str
    status: EntryStatus
    response: Optional[Any] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class IdempotencyStore:
    """In-memory idempotency key store with TTL expiry."""

    def __init__(self, ttl_minutes: int = 30):
        self._store: Dict[str, IdempotencyEntry] = {}
        self._lock = asyncio.Lock()
        self._ttl = timedelta(minutes=ttl_minutes)

    async def acquire(self, key: str) -> Optional[IdempotencyEntry]:
        """
        Claim a key.

        Returns:
            None if the key was free and is now held by the caller,
            otherwise the existing entry
        """
        async with self._lock:
            self._cleanup_expired()

            entry = self._store.get(key)
            if entry is not None:
                log.debug("idempotency key exists", status=entry.status)
                return entry

            self._store[key] = IdempotencyEntry(key=key, status="in_progress")
            return None

    async def complete(self, key: str, response: Any) -> None:
        """Record the response for a held key."""
        async with self._lock:
            entry = self._store.get(key)
            if entry is not None:
                entry.status = "completed"
                entry.response = response

    async def release(self, key: str) -> None:
        """Drop a held key after a failure so the client may retry."""
        async with self._lock:
            if self._store.pop(key, None) is not None:
                log.debug("idempotency key released after failure")

    def clear(self) -> None:
        self._store.clear()

    def _cleanup_expired(self) -> None:
        """Remove expired entries. Must be called with lock held."""
        now = datetime.now(timezone.utc)
        expired = [k for k, v in self._store.items() if now - v.created_at > self._ttl]
        for k in expired:
            del self._store[k]
        if expired:
            log.debug("cleaned up expired idempotency keys", count=len(expired))
