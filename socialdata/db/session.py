from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool, NullPool
from sqlalchemy import text
from typing import Optional
import logging

from socialdata.config import settings
from socialdata.db.base import Base
from socialdata.db.store import DocumentStore
from socialdata.realtime.manager import LocalChangeFeed, create_change_feed

logger = logging.getLogger(__name__)

def create_engine(url: Optional[str] = None) -> AsyncEngine:
    """Create the async engine for the document store"""
    store_url = url or settings.store_url

    if "sqlite" in store_url:
        # SQLite configuration for testing and on-device use
        return create_async_engine(
            store_url,
            echo=settings.DEBUG,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool if ":memory:" in store_url else NullPool,
        )

    # PostgreSQL configuration for shared deployments
    return create_async_engine(
        store_url,
        echo=settings.DEBUG,
        pool_size=settings.STORE_POOL_SIZE,
        max_overflow=settings.STORE_MAX_OVERFLOW,
        pool_pre_ping=True,
    )

def create_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

def create_store(engine: AsyncEngine, feed: Optional[LocalChangeFeed] = None) -> DocumentStore:
    """Build a document store on an engine"""
    return DocumentStore(create_session_factory(engine), feed or create_change_feed())

async def init_db(bind: AsyncEngine):
    """Initialize the store (create tables, etc.)"""
    async with bind.begin() as conn:
        # Create all tables
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Document store initialized successfully")

async def check_connection(bind: AsyncEngine) -> bool:
    """Test the store connection"""
    try:
        async with bind.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Document store connection successful")
        return True
    except Exception as e:
        logger.error(f"Document store connection failed: {e}")
        return False

async def close_db(bind: AsyncEngine):
    """Close store connections"""
    await bind.dispose()
    logger.info("Document store connections closed")
