import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from src.core import settings

logger = logging.getLogger(__name__)

connection_string = settings.database.assemble_db_connection()
logger.debug(f"Database host: {settings.database.HOST}:{settings.database.PORT}/{settings.database.DATABASE}")
async_engine = create_async_engine(connection_string, poolclass=NullPool)
AsyncSessionLocal: async_sessionmaker[AsyncSession] = async_sessionmaker(
    async_engine, autoflush=True, expire_on_commit=False, class_=AsyncSession
)


async def create_tables() -> None:
    """Create any missing table. Existing tables are left untouched."""
    from src.database.models import Base

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables are in place")
