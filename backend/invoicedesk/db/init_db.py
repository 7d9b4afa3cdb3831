import asyncio
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from invoicedesk.db import session
from invoicedesk.db.base import Base

logger = logging.getLogger(__name__)

async def init_db(bind: Optional[AsyncEngine] = None) -> None:
    """
    Create every table known to the metadata.
    Deployments run Alembic instead; this is for local development and tests.
    """
    engine = bind or session.engine
    if engine is None:
        logger.error("Database engine is not initialized. Cannot create tables.")
        return

    logger.info("Creating all tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables created successfully.")


if __name__ == "__main__":
    from invoicedesk.core.logging import configure_logging

    configure_logging()
    asyncio.run(init_db())
