"""Request logging middleware.

Logs method, path, status and duration only. Bodies are never logged.
"""

from time import perf_counter

from fastapi import Request

from src.utils.logger import clear_request_id, get_logger, set_request_id

log = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


async def logging_middleware(request: Request, call_next):
    """Bind a request id, time the request and echo the id back."""
    request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
    start = perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        log.error(
            "request failed",
            method=request.method,
            path=request.url.path,
            duration_ms=round((perf_counter() - start) * 1000, 2),
        )
        clear_request_id()
        raise

    log.info(
        "request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round((perf_counter() - start) * 1000, 2),
    )
    response.headers[REQUEST_ID_HEADER] = request_id
    clear_request_id()
    return response
