# app/core/database.py
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from .config import settings
import logging
from typing import AsyncGenerator

logger = logging.getLogger(__name__)


def build_engine_kwargs(database_url: str) -> dict:
    """Engine options for the configured backend.

    SQLite (local runs and tests) does not accept the pool sizing options
    used for PostgreSQL.
    """
    if database_url.startswith("sqlite"):
        return {"echo": False, "future": True}

    engine_kwargs = {
        "echo": False,
        "future": True,
        "pool_size": 5,
        "max_overflow": 5,
        "pool_timeout": 30,       # Seconds to wait for a free connection
        "pool_pre_ping": True,    # Check connection before using
        "pool_recycle": 300,      # Recycle connections after 5 minutes
    }

    if settings.is_supabase:
        # PgBouncer cannot hold prepared statements between transactions
        engine_kwargs["connect_args"] = {
            "statement_cache_size": 0,
            "prepared_statement_cache_size": 0,
            "timeout": 10,
        }
        logger.info("🔧 Configured engine for Supabase/PgBouncer (prepared statements disabled, connect timeout set)")

    return engine_kwargs


engine = create_async_engine(
    settings.DATABASE_URL,
    **build_engine_kwargs(settings.DATABASE_URL)
)

# AsyncSession factory, also used by the background workers
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession,
)

# Base class for all models
Base = declarative_base()


async def create_db_and_tables() -> None:
    # Local/dev convenience; production schemas are managed by Alembic
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Dependency to get DB session with proper exception handling
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    session = AsyncSessionLocal()
    try:
        yield session
    except Exception as e:
        logger.error(f"Database session error: {str(e)}")
        await session.rollback()
        raise
    finally:
        await session.close()
        logger.debug("Database session closed")
