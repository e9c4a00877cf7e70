"""Custom exception hierarchy with HTTP status codes and error codes."""

from typing import Any, Optional


class BaseAPIException(Exception):
    """Base exception for all application errors."""

    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.details = details
        super().__init__(message)


# ============================================================================
# Client input
# ============================================================================


class ValidationError(BaseAPIException):
    """Report fields supplied by the caller are malformed."""

    status_code = 400
    error_code = "VALIDATION_ERROR"


class BadRequestError(BaseAPIException):
    """Ingest payload is missing required fields or has invalid values."""

    status_code = 400
    error_code = "BAD_REQUEST"


class IdempotencyConflictError(BaseAPIException):
    """A request with the same Idempotency-Key is still being processed."""

    status_code = 409
    error_code = "IDEMPOTENCY_CONFLICT"

    def __init__(self):
        super().__init__(message="A submission with this Idempotency-Key is in progress")


class ResourceNotFoundError(BaseAPIException):
    status_code = 404
    error_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            message=f"{resource_type} not found: {resource_id}",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


# ============================================================================
# Cryptography and serialization
# ============================================================================


class CryptoUnavailableError(BaseAPIException):
    """The cryptographic primitive or randomness source cannot be used."""

    status_code = 500
    error_code = "CRYPTO_UNAVAILABLE"


class EncodingError(BaseAPIException):
    """Plaintext could not be converted to bytes."""

    status_code = 400
    error_code = "ENCODING_ERROR"


class SerializationError(BaseAPIException):
    """Report payload could not be canonically serialized."""

    status_code = 400
    error_code = "SERIALIZATION_ERROR"


# ============================================================================
# Transport and persistence
# ============================================================================


class SubmissionError(BaseAPIException):
    """Transport or backend failure while submitting a report."""

    status_code = 502
    error_code = "SUBMISSION_FAILED"

    def __init__(
        self,
        message: str = "Report submission failed",
        upstream_status: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.upstream_status = upstream_status
        details = dict(details or {})
        if upstream_status is not None:
            details["upstream_status"] = upstream_status
        super().__init__(message=message, details=details or None)


class PersistenceError(BaseAPIException):
    """The report could not be committed to storage."""

    status_code = 500
    error_code = "PERSISTENCE_ERROR"
