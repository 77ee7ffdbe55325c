"""
Health Check Endpoints
System status checks
"""
from fastapi import APIRouter, status
from datetime import datetime

from app.core.config import settings
from app.database import verifyDatabaseConnection

router = APIRouter()


@router.get("/health", status_code=status.HTTP_200_OK)
async def healthCheck():
    """
    Basic health check

    Notes:
    - Only says the API is alive, does not touch the database
    - Used by load balancer health checks
    """
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/health/database", status_code=status.HTTP_200_OK)
async def databaseHealthCheck():
    """
    Database and scorer configuration check

    Response:
    {
        "status": "healthy",
        "timestamp": "...",
        "connections": {"sqlalchemy": {"status": "connected", "message": "..."}},
        "scorer": {"status": "configured", "model": "google/gemini-2.0-flash-001"}
    }
    """
    database = await verifyDatabaseConnection()

    return {
        "status": "healthy" if database["status"] == "connected" else "unhealthy",
        "timestamp": datetime.utcnow().isoformat(),
        "connections": {"sqlalchemy": database},
        "scorer": {
            "status": "configured" if settings.OPENROUTER_API_KEY else "not_configured",
            "model": settings.MATCHING_MODEL
        }
    }
