"""
Tree Leaves Backend — Health Check Schemas
============================================

What:  Response models for /api/health, /api/health/ready and /api/health/live.
"""

from typing import Optional

from pydantic import Field

from app.schemas.common import ApiResponse, CamelModel, utc_timestamp


class LeavesHealth(CamelModel):
    total: int = Field(description="Number of leaves currently in the store")
    data_file: str = Field(description="exists, missing, corrupt or memory")


class MemoryHealth(CamelModel):
    used: str = Field(description="Resident memory of this process, e.g. '45 MB'")
    total: str = Field(description="Physical memory of the host, e.g. '8192 MB'")


class HealthResponse(ApiResponse):
    """
    What:  Aggregate health: process metadata plus a store read.
    Who:   Returned by GET /api/health for monitoring.
    """
    status: str = Field(description="OK or ERROR")
    timestamp: str = Field(default_factory=utc_timestamp)
    uptime: float = Field(description="Seconds since service started")
    environment: str
    platform: str = Field(description="local (file-backed) or memory (ephemeral)")
    version: str
    python_version: str
    memory: MemoryHealth
    leaves: LeavesHealth


class ReadinessResponse(ApiResponse):
    status: str = Field(description="READY or NOT_READY")
    timestamp: str = Field(default_factory=utc_timestamp)
    message: Optional[str] = None
    error: Optional[str] = None


class LivenessResponse(ApiResponse):
    status: str = "ALIVE"
    timestamp: str = Field(default_factory=utc_timestamp)
    uptime: float
