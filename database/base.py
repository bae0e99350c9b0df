"""Database base configuration and session management."""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import BigInteger, Integer
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from core.exceptions import StorageUnavailableError
from panel.config import settings

logger = logging.getLogger(__name__)

# SQLite only autoincrements INTEGER primary keys
BigIntPK = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def is_storage_failure(exc: BaseException) -> bool:
    """Whether the exception means the store is unreachable rather than a bad statement."""
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return isinstance(exc, (ConnectionError, OSError, asyncio.TimeoutError))


class Database:
    """
    Owns the async engine and session factory.
    
    The engine is created on first use and disposed by close(). One instance
    is created per application and handed to whoever needs sessions.
    """
    
    def __init__(
        self,
        url: str | None = None,
        *,
        echo: bool | None = None,
        pool_size: int | None = None,
        max_overflow: int | None = None,
    ):
        self.url = url or settings.database_url
        self.echo = settings.debug if echo is None else echo
        self.pool_size = pool_size or settings.database_pool_size
        self.max_overflow = max_overflow or settings.database_max_overflow
        self._engine: AsyncEngine | None = None
        self._session_maker: async_sessionmaker[AsyncSession] | None = None
    
    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")
    
    @property
    def engine(self) -> AsyncEngine:
        """Lazily create the engine (and its connection pool)."""
        if self._engine is None:
            if self.is_sqlite:
                self._engine = create_async_engine(
                    self.url,
                    echo=self.echo,
                    connect_args={"check_same_thread": False},
                )
            else:
                self._engine = create_async_engine(
                    self.url,
                    echo=self.echo,
                    pool_size=self.pool_size,
                    max_overflow=self.max_overflow,
                    pool_pre_ping=True,
                )
            self._session_maker = async_sessionmaker(
                self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            logger.info("Database engine created")
        return self._engine
    
    @property
    def session_maker(self) -> async_sessionmaker[AsyncSession]:
        if self._session_maker is None:
            self.engine
        return self._session_maker
    
    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Open a session wrapping one transaction.
        
        Commits when the block exits cleanly and rolls back otherwise.
        Connection-level failures are re-raised as StorageUnavailableError.
        """
        async with self.session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                await session.rollback()
                if is_storage_failure(e):
                    logger.error(f"Storage failure: {e}", exc_info=True)
                    raise StorageUnavailableError() from e
                raise
    
    async def create_all(self) -> None:
        """Create all tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    
    async def close(self) -> None:
        """Close database connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_maker = None
            logger.info("Database engine disposed")
