import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from core.database import engine
from models.base import Base, import_all_models

log = logging.getLogger(__name__)


async def async_init_database(db_engine: AsyncEngine = engine):
    import_all_models()
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    log.info("Database schema is up to date.")


async def async_reset_database(db_engine: AsyncEngine = engine):
    import_all_models()
    log.info("Dropping all tables...")
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all, checkfirst=True)

    log.info("Recreating all tables...")
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    log.info("Database schema has been reset.")


def reset_database():
    asyncio.run(async_reset_database())


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    reset_database()
