"""
Database configuration and connection management
"""
import logging
import re

from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from core.config import settings
from services.catalog_store import SqlCatalogStore

logger = logging.getLogger(__name__)

# Convert postgresql:// to postgresql+asyncpg:// for async support
DATABASE_URL = settings.database_url.replace("postgresql://", "postgresql+asyncpg://")

# asyncpg takes "require" to encrypt without verifying the server certificate
connect_args = {"ssl": "require"} if settings.use_ssl else {}

engine = create_async_engine(
    DATABASE_URL,
    echo=settings.debug and settings.log_level.upper() == "DEBUG",
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
    pool_pre_ping=True,
    connect_args=connect_args,
)

catalog_store = SqlCatalogStore(engine)


def sanitize_url(url: str) -> str:
    """Hide credentials in a database URL before it is logged."""
    return re.sub(r":\/\/[^:]*:[^@]*@", "://***:***@", url)


async def check_connection() -> bool:
    """Ping the database once at startup; failures are logged, not raised."""
    try:
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT NOW()"))
            now = result.scalar()
        logger.info(f"Database connected: {sanitize_url(settings.database_url)} (server time {now})")
        return True
    except Exception as e:
        logger.error(f"Error connecting to database: {e}")
        return False


async def dispose_engine():
    """Release pooled connections"""
    await engine.dispose()
    logger.info("Database connections closed")


def get_catalog_store() -> SqlCatalogStore:
    """FastAPI dependency for catalog reads"""
    return catalog_store
