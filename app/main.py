"""
FastAPI Application Entry Point
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from app.core.config import settings
from app.api.v1.router import apiRouter
from app.services import getOpenRouterService
from app.utils.logger import logger
from app.database import verifyDatabaseConnection, closeConnections


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events

    Runs at app START and SHUTDOWN
    """
    # ========== STARTUP ==========
    logger.info("=" * 70)
    logger.info(f"🚀 {settings.PROJECT_NAME} v{settings.VERSION}")
    logger.info(f"📍 Environment: {settings.ENVIRONMENT}")
    logger.info("=" * 70)
    
    database = await verifyDatabaseConnection()
    if database["status"] != "connected":
        logger.error(f"❌ Database: {database['message']}")
    
    # Configure the scorer once at process start
    scorer = getOpenRouterService()
    logger.info(f"🤖 Scorer: {settings.MATCHING_MODEL} ({'configured' if scorer.isConfigured else 'not configured'})")
    
    yield  # Application is running
    
    # ========== SHUTDOWN ==========
    logger.info("=" * 70)
    logger.info(f"🛑 {settings.PROJECT_NAME} shutting down...")
    logger.info("=" * 70)
    
    await scorer.close()
    await closeConnections()
    
    logger.info("✅ Shutdown complete")


# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Moments backend - resurfaces saved thoughts for upcoming situations",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint - API information"""
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "docs": "/docs" if settings.DEBUG else "disabled in production",
        "health": "/api/v1/health"
    }


# Include API v1 router
app.include_router(apiRouter, prefix="/api/v1")


# Global exception handler
@app.exception_handler(Exception)
async def globalExceptionHandler(request, exc):
    """Catch every exception that was not handled"""
    logger.error(f"❌ Unhandled exception: {exc}", exc_info=True)
    
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "type": type(exc).__name__ if settings.DEBUG else None
        }
    )
