"""
Health check endpoints for monitoring application status
"""
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import text

from cloudstage.api.deps import get_services
from cloudstage.core.container import ServiceContainer
from cloudstage.models.common import HealthResponse

router = APIRouter(prefix="/health")

VERSION = "1.0.0"


@router.get("", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint to verify the API is running
    """
    return HealthResponse(
        status="healthy",
        message="CloudStage API is running",
        timestamp=datetime.utcnow(),
        version=VERSION,
    )


@router.get("/ready", response_model=HealthResponse)
async def readiness_check(services: ServiceContainer = Depends(get_services)):
    """
    Readiness check: the database must answer
    """
    async with services.engine.connect() as conn:
        await conn.execute(text("SELECT 1"))

    return HealthResponse(
        status="ready",
        message="CloudStage API is ready to accept requests",
        timestamp=datetime.utcnow(),
        version=VERSION,
    )
