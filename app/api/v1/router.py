"""
API v1 Main Router
"""
from fastapi import APIRouter
from app.api.v1.endpoints import health, moments

apiRouter = APIRouter()

apiRouter.include_router(
    health.router,
    tags=["Health"]
)

# Moment pipeline + learning endpoints
apiRouter.include_router(
    moments.router,
    prefix="/moments",
    tags=["Moments"]
)
