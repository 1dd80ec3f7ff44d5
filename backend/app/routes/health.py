"""
Tree Leaves Backend — Health Check Routes
===========================================

What:  Liveness, readiness and aggregate health endpoints.
How:   Delegates every storage question to the application's LeafStore.
Who:   Called by container health checks, load balancers and uptime monitors.

Endpoints:
    GET /api/health/live   → always 200 ALIVE while the process can answer
    GET /api/health/ready  → 200 READY when the store can be written,
                             503 NOT_READY otherwise
    GET /api/health        → 200 OK with uptime, environment, memory and leaf count,
                             500 ERROR if any check raises
"""

import logging
import platform as py_platform
import time

import psutil
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app import __version__
from app.config import Settings
from app.dependencies import get_leaf_store, get_settings
from app.schemas.common import utc_timestamp
from app.schemas.health import (
    HealthResponse,
    LeavesHealth,
    LivenessResponse,
    MemoryHealth,
    ReadinessResponse,
)
from app.services.leaf_store import LeafStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/health", tags=["Health"])

# Track when the service started for uptime reporting
_start_time = time.time()


def uptime_seconds() -> float:
    return round(time.time() - _start_time, 3)


def _megabytes(num_bytes: int) -> str:
    return f"{round(num_bytes / (1024 * 1024))} MB"


def process_memory() -> MemoryHealth:
    """Resident memory of this process and physical memory of the host."""
    rss = psutil.Process().memory_info().rss
    return MemoryHealth(used=_megabytes(rss), total=_megabytes(psutil.virtual_memory().total))


@router.get(
    "",
    response_model=HealthResponse,
    summary="Service health check",
    description="Process metadata plus the current leaf count read from storage.",
)
async def health_check(
    store: LeafStore = Depends(get_leaf_store),
    settings: Settings = Depends(get_settings),
):
    try:
        leaves = await store.read()
        return HealthResponse(
            status="OK",
            uptime=uptime_seconds(),
            environment=settings.environment,
            platform=store.platform,
            version=__version__,
            python_version=py_platform.python_version(),
            memory=process_memory(),
            leaves=LeavesHealth(total=len(leaves), data_file=store.data_file_status),
        )
    except Exception as e:
        logger.error("Health check error: %s", str(e), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "status": "ERROR",
                "timestamp": utc_timestamp(),
                "error": str(e),
            },
        )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    response_model_exclude_none=True,
    responses={503: {"description": "Storage is not writable", "model": ReadinessResponse}},
    summary="Readiness check",
)
async def readiness_check(store: LeafStore = Depends(get_leaf_store)):
    try:
        writable = store.is_writable()
    except Exception as e:
        logger.warning("Readiness check failed: %s", str(e))
        return JSONResponse(
            status_code=503,
            content=ReadinessResponse(
                success=False, status="NOT_READY", error=str(e)
            ).model_dump(by_alias=True, exclude_none=True),
        )

    if writable:
        return ReadinessResponse(
            status="READY",
            message="Application is ready to serve requests",
        )

    logger.warning("Readiness check: data directory is not writable")
    return JSONResponse(
        status_code=503,
        content=ReadinessResponse(
            success=False,
            status="NOT_READY",
            message="Data directory is not writable",
        ).model_dump(by_alias=True, exclude_none=True),
    )


@router.get(
    "/live",
    response_model=LivenessResponse,
    summary="Liveness check",
)
async def liveness_check() -> LivenessResponse:
    return LivenessResponse(uptime=uptime_seconds())
