"""
Create the handover database tables.
Run from backend/ with: python -m scripts.init_db
"""

import asyncio
from app.database import engine, Base
from app.logging_config import get_logger, setup_logging
from app.models import User, Patient, Handover  # noqa: F401

logger = get_logger(__name__)


async def init():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("tables_created", tables=sorted(Base.metadata.tables))
    await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(init())
