"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from fastapi import FastAPI

from src import __version__
from src.config import get_settings
from src.database import engine, init_db
from src.factories.service_factories import get_cipher
from src.routers import health, reports
from src.middleware import logging_middleware, register_cors, register_exception_handlers
from src.utils.logger import configure_logging, get_logger

settings = get_settings()

# Configure logging early
configure_logging(log_level=settings.log_level, debug=settings.debug)
log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the reports table and check AES-GCM before accepting traffic."""
    log.info("safe report api starting", version=__version__, debug=settings.debug)
    await init_db()
    if not get_cipher().self_test():
        log.error("aes-gcm self-test failed, health will report degraded")

    yield

    await engine.dispose()
    log.info("safe report api stopped")


app = FastAPI(
    title="Safe Report API",
    description="Anonymous, client-side encrypted incident reports with tamper-evident receipts",
    version=__version__,
    lifespan=lifespan,
)

register_exception_handlers(app)

register_cors(app, settings.get_cors_origins_list())

app.middleware("http")(logging_middleware)

app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(reports.router, prefix="/api/v1", tags=["Reports"])


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Safe Report API",
        "version": __version__,
        "endpoints": {
            "health": "/api/v1/health",
            "submit": "/api/v1/submit-report",
            "verify": "/api/v1/reports/verify/{report_hash}",
            "statistics": "/api/v1/reports/statistics",
        },
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
