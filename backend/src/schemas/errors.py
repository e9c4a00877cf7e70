"""Error response schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every non-2xx response. ``error`` is the human-readable message."""

    error: str
    code: str
    details: Optional[dict[str, Any]] = None
    request_id: Optional[str] = None
    timestamp: datetime
