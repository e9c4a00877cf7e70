"""HTTP client for the report ingest endpoint."""

from typing import Any, Optional

import httpx

from src.exceptions import SubmissionError
from src.utils.logger import get_logger

log = get_logger(__name__)


class ReportIngestClient:
    """Posts encrypted report payloads to the ingest endpoint. Never retries."""

    def __init__(
        self,
        endpoint_url: str,
        api_key: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint_url = endpoint_url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _headers(self, idempotency_key: Optional[str]) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
            headers["apikey"] = self.api_key
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key
        return headers

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Pull the ``error`` string out of a failure body, falling back to the status line."""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("error"), str):
            return body["error"]
        return f"Ingest endpoint returned HTTP {response.status_code}"

    async def submit(
        self, payload: dict[str, Any], idempotency_key: Optional[str] = None
    ) -> dict[str, Any]:
        """
        Send one report payload.

        Args:
            payload: camelCase wire payload with encrypted fields
            idempotency_key: Optional key forwarded as ``Idempotency-Key``

        Returns:
            Decoded success body

        Raises:
            SubmissionError: On transport failure, non-2xx status or malformed body
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.endpoint_url,
                    headers=self._headers(idempotency_key),
                    json=payload,
                )
        except httpx.HTTPError as e:
            log.warning("report submission transport failure", error_type=type(e).__name__)
            raise SubmissionError(
                message=f"Could not reach ingest endpoint: {type(e).__name__}",
                details={"error_type": type(e).__name__},
            )

        if response.is_error:
            message = self._error_message(response)
            log.warning("report submission rejected", status_code=response.status_code)
            raise SubmissionError(message=message, upstream_status=response.status_code)

        try:
            body = response.json()
        except ValueError:
            raise SubmissionError(
                message="Ingest endpoint returned a non-JSON body",
                upstream_status=response.status_code,
            )
        if not isinstance(body, dict) or body.get("success") is not True:
            raise SubmissionError(
                message="Ingest endpoint did not confirm the submission",
                upstream_status=response.status_code,
            )
        return body
