from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import declarative_base
from typing import AsyncGenerator
from sqlalchemy import text

from app.core.config import settings
from app.utils.logger import logger


# ============================================
# BASE CLASS FOR MODELS
# ============================================
Base = declarative_base()


# ============================================
# SQLALCHEMY ASYNC ENGINE
# ============================================

def buildDatabaseUrl(rawUrl: str) -> str:
    """
    Normalize the configured connection string

    - postgresql:// -> postgresql+asyncpg:// (async driver)
    - Query parameters are dropped for postgres (asyncpg rejects ?pgbouncer=true etc.)
    - Any other async URL (sqlite+aiosqlite://...) is used as-is
    """
    if rawUrl.startswith("postgresql://"):
        return rawUrl.replace("postgresql://", "postgresql+asyncpg://").split("?")[0]
    if rawUrl.startswith("postgresql+asyncpg://"):
        return rawUrl.split("?")[0]
    return rawUrl


DATABASE_URL = buildDatabaseUrl(settings.DATABASE_URL)


def createEngine(databaseUrl: str) -> AsyncEngine:
    """Create the async engine with pool settings suited to the backend"""
    if databaseUrl.startswith("postgresql+asyncpg://"):
        return create_async_engine(
            databaseUrl,
            echo=False,
            future=True,
            pool_pre_ping=True,  # Test connection before use
            pool_size=10,
            max_overflow=20,
            pool_recycle=3600,  # Recycle connection after 1 hour
            connect_args={
                "statement_cache_size": 0,  # Disable prepared statements for pgbouncer
                "server_settings": {
                    "application_name": "moments-backend"
                }
            }
        )

    return create_async_engine(databaseUrl, echo=False, future=True)


engine = createEngine(DATABASE_URL)


# Session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def getDbSession() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function that injects a DB session into FastAPI endpoints

    Notes:
    - New session per request
    - Commit when the request finishes without exception
    - Rollback on exception
    - Session closed after the request

    Usage in FastAPI:
        from fastapi import Depends
        from sqlalchemy.ext.asyncio import AsyncSession
        from app.database import getDbSession

        @router.get("/moments")
        async def listMoments(db: AsyncSession = Depends(getDbSession)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()  # Auto commit if no exception
        except Exception:
            await session.rollback()  # Rollback on error
            raise
        finally:
            await session.close()


async def createTables(targetEngine: AsyncEngine = None):
    """Create all tables (local development and tests; production uses migrations)"""
    # Register models on Base.metadata
    import app.models  # noqa: F401

    async with (targetEngine or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ============================================
# TEST CONNECTIONS
# ============================================

async def verifyDatabaseConnection() -> dict:
    """
    Test SQLAlchemy engine connection

    Notes:
    - Runs "SELECT 1" to verify the connection pool works
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

        return {
            "status": "connected",
            "message": "SQLAlchemy connection successful",
            "type": "SQLAlchemy Async Engine"
        }
    except Exception as e:
        logger.error(f"❌ SQLAlchemy connection test failed: {e}")
        return {
            "status": "failed",
            "message": str(e),
            "type": "SQLAlchemy Async Engine"
        }


async def closeConnections():
    """
    Close all database connections

    Notes:
    - Called at app shutdown
    - Disposing the engine closes every connection in the pool
    """
    await engine.dispose()
    logger.info("🔌 Database connections closed")
