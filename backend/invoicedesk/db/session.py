from typing import Any, AsyncGenerator, Optional
import logging

from fastapi import HTTPException
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from invoicedesk.core.config import settings
from invoicedesk.core.logging import mask_database_url

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # Costing rows, payments and item rows rely on ON DELETE CASCADE
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_for(url: str, **kwargs: Any) -> AsyncEngine:
    """
    Async engine for a database URL. SQLite engines enforce foreign keys on
    every connection; server databases get connection health checks.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = create_async_engine(url, **kwargs)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    kwargs.setdefault("pool_pre_ping", True)
    return create_async_engine(url, **kwargs)


def create_session_factory(bind: AsyncEngine) -> sessionmaker:
    return sessionmaker(bind=bind, class_=AsyncSession, autoflush=False, expire_on_commit=False)


engine: Optional[AsyncEngine] = None
SessionLocal: Optional[sessionmaker] = None

if not settings.DATABASE_URL:
    logger.error("DATABASE_URL is not set. Please check your environment variables and configuration.")
else:
    logger.info(f"Configuring database: {mask_database_url(settings.DATABASE_URL)}")
    try:
        engine = create_engine_for(settings.DATABASE_URL)
        SessionLocal = create_session_factory(engine)
    except Exception as e:
        logger.error(f"Failed to create database engine: {e}")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session. 503 while the database is not configured.
    """
    if not SessionLocal:
        logger.error("Session factory is not initialized; refusing request")
        raise HTTPException(status_code=503, detail="Database connection is not available.")

    db: AsyncSession = SessionLocal()
    try:
        yield db
    finally:
        await db.close()
