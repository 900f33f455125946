"""
Database connection and session management
Using SQLModel with asyncpg (PostgreSQL) or aiosqlite (SQLite) for async operations
"""
from sqlmodel import SQLModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from typing import AsyncGenerator, Optional
import ssl
import os
import logging
from app.config import DATABASE_URL, DB_SSL_CERT_PATH, DEBUG, MODE

logger = logging.getLogger(__name__)


def to_async_url(url: str) -> str:
    """Convert plain driver URLs to their async dialect (postgresql+asyncpg / sqlite+aiosqlite)"""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def build_ssl_context(cert_path: str) -> Optional[ssl.SSLContext]:
    """
    Create an SSL context for asyncpg from a CA certificate file.
    Returns None when the certificate is missing or empty.
    """
    if not cert_path:
        return None
    try:
        if not os.path.exists(cert_path):
            logger.warning(f"SSL certificate file not found: {cert_path}")
            return None
        file_size = os.path.getsize(cert_path)
        if file_size == 0:
            logger.warning(f"SSL certificate file is empty: {cert_path}")
            return None

        logger.info(f"Loading SSL certificate from: {cert_path} ({file_size} bytes)")
        context = ssl.create_default_context(cafile=cert_path)
        # Managed databases are reached through pooler hostnames
        context.check_hostname = False
        context.verify_mode = ssl.CERT_REQUIRED
        return context
    except Exception as e:
        logger.error(f"Failed to create SSL context: {e}", exc_info=True)
        return None


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine for the content store.

    PostgreSQL gets pool settings plus pgbouncer-safe connect args
    (statement_cache_size=0) and the optional SSL context. SQLite keeps
    SQLAlchemy's default pool.
    """
    url = to_async_url(url)

    if url.startswith("postgresql+asyncpg://"):
        connect_args = {
            "command_timeout": 30,
            "statement_cache_size": 0,  # pgbouncer (port 6543) does not support prepared statements
            "server_settings": {
                "application_name": "forsaj_content_api"
            }
        }
        ssl_config = build_ssl_context(DB_SSL_CERT_PATH)
        if ssl_config:
            connect_args["ssl"] = ssl_config
            logger.info("SSL enabled for database connections")
        else:
            logger.warning("SSL not configured - database connections will be unencrypted")

        return create_async_engine(
            url,
            echo=echo,
            pool_pre_ping=True,  # Verify connections before using
            pool_recycle=3600,
            pool_timeout=10,  # Connection acquisition timeout
            pool_size=10,
            max_overflow=20,
            connect_args=connect_args,
        )

    return create_async_engine(url, echo=echo)


def mask_url(url: str) -> str:
    """Hide credentials in a database URL for logging"""
    url_parts = url.split("@")
    if len(url_parts) > 1:
        host_part = url_parts[1].split("/")[0] if "/" in url_parts[1] else url_parts[1]
        scheme = url_parts[0].split("://")[0]
        return f"{scheme}://***@{host_part}"
    return url


async_engine = build_engine(DATABASE_URL, echo=DEBUG)

logger.info(f"Database engine created (mode: {MODE}, url: {mask_url(str(async_engine.url))})")

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get async database session
    Usage: async def endpoint(session: AsyncSession = Depends(get_async_session))
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db(engine: AsyncEngine = None):
    """
    Initialize database - create all tables
    Raises on connection failure so callers can retry.
    """
    engine = engine or async_engine
    async with engine.begin() as conn:
        # Import all models here so SQLModel can create tables
        from app.apps.content.models import SiteContent  # noqa: F401

        await conn.run_sync(SQLModel.metadata.create_all)


async def close_db(engine: AsyncEngine = None):
    """
    Close database connections
    Call this on application shutdown
    """
    await (engine or async_engine).dispose()
    logger.info("Database connections closed")


async def test_db_connection(engine: AsyncEngine = None) -> bool:
    """
    Test database connection - useful for debugging
    """
    try:
        async with (engine or async_engine).connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            value = result.scalar()
            logger.info(f"Database connection test successful: {value}")
            return True
    except Exception as e:
        logger.error(f"Database connection test failed: {e}", exc_info=True)
        return False
