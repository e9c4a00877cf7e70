"""CORS setup for the report API.

The submit endpoint is called from arbitrary browser origins and its preflight
must always succeed, so ``OPTIONS /api/v1/submit-report`` is answered before
``CORSMiddleware`` applies the configured origin list.
"""

from typing import List

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

SUBMIT_REPORT_PATH = "/api/v1/submit-report"

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type, idempotency-key",
}


async def submit_preflight_middleware(request: Request, call_next):
    """Answer submit-report preflights with 200 and an empty body, whatever the origin or payload."""
    if request.method == "OPTIONS" and request.url.path.rstrip("/") == SUBMIT_REPORT_PATH:
        return Response(status_code=200, headers=PREFLIGHT_HEADERS)
    return await call_next(request)


def register_cors(app: FastAPI, cors_origins: List[str]) -> None:
    """
    Install CORS handling.

    An empty origin list allows every origin without credentials. The submit
    preflight middleware is added last so it wraps ``CORSMiddleware``.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_credentials=bool(cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(submit_preflight_middleware)
