"""Health check router."""

from datetime import datetime, timezone

from fastapi import APIRouter

from src import __version__
from src.dependencies import CipherDep, ReportRepoDep
from src.schemas.health import HealthResponse, ServiceStatus
from src.utils.logger import get_logger

router = APIRouter()
log = get_logger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health_check(report_repo: ReportRepoDep, cipher: CipherDep) -> HealthResponse:
    """
    Health check for the ingest service.

    Checks:
    - Database connectivity and report count
    - Authenticated encryption available in this process
    """
    services = {}
    overall_status = "ok"

    try:
        reports_count = await report_repo.count()
        services["database"] = ServiceStatus(
            status="healthy",
            message="Connected",
            details={"reports_count": reports_count},
        )
    except Exception as e:
        log.error("health check failed", service="database", error=str(e))
        services["database"] = ServiceStatus(status="unhealthy", message="Service unavailable")
        overall_status = "degraded"

    if cipher.self_test():
        services["crypto"] = ServiceStatus(status="healthy", message="AES-GCM available")
    else:
        log.error("health check failed", service="crypto")
        services["crypto"] = ServiceStatus(status="unhealthy", message="AES-GCM unavailable")
        overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        version=__version__,
        services=services,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )
