"""
Фабрика для создания сессий базы данных
"""

import asyncio
from typing import AsyncGenerator, Optional
from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from core.config.settings import settings
from core.logging.logger import logger


class DatabaseManager:
    """Менеджер базы данных для создания сессий.

    Движок создается лениво при первом обращении и переиспользуется
    до конца жизни процесса. Параллельные вызовы initialize() ждут
    одну и ту же инициализацию под asyncio.Lock. Lock привязан к циклу
    событий, в котором создан, поэтому для нового цикла создается заново.
    """

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or settings.async_database_url
        self.engine: Optional[AsyncEngine] = None
        self.session_factory = None
        self._initialized = False
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    def _get_lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def initialize(self) -> None:
        """Инициализирует подключение к базе данных."""
        if self._initialized:
            return

        async with self._get_lock():
            # Другой вызов мог завершить инициализацию, пока мы ждали lock
            if self._initialized:
                return

            try:
                self.engine = create_async_engine(
                    self.database_url,
                    echo=settings.database_echo,
                    pool_size=settings.database_pool_size,
                    max_overflow=settings.database_max_overflow,
                    pool_pre_ping=True,
                    pool_recycle=3600,
                )

                self.session_factory = sessionmaker(
                    bind=self.engine,
                    class_=AsyncSession,
                    expire_on_commit=False
                )

                self._initialized = True
                logger.info(
                    "Database connection initialized successfully",
                    pool_size=settings.database_pool_size,
                    max_overflow=settings.database_max_overflow,
                )

            except Exception as e:
                logger.error(f"Failed to initialize database connection: {e}")
                raise

    async def close(self) -> None:
        """Закрывает подключение к базе данных."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None
            self._initialized = False
            self._lock = None
            self._lock_loop = None
            logger.info("Database connection closed")

    def get_session(self) -> AsyncSession:
        """Возвращает новую сессию базы данных."""
        if not self._initialized:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        return self.session_factory()

    async def get_session_async(self) -> AsyncGenerator[AsyncSession, None]:
        """Асинхронный генератор для получения сессий."""
        await self.initialize()
        session = self.get_session()
        try:
            yield session
        finally:
            await session.close()


# Глобальный экземпляр менеджера БД
db_manager = DatabaseManager()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency для получения сессии БД."""
    async for session in db_manager.get_session_async():
        yield session


async def init_database() -> None:
    """Инициализирует базу данных."""
    await db_manager.initialize()


async def close_database() -> None:
    """Закрывает подключение к базе данных."""
    await db_manager.close()


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Асинхронный контекстный менеджер для получения сессии БД.

    Обеспечивает ленивую инициализацию подключения и корректное закрытие сессии.
    Использование:
        async with get_async_session() as session:
            ...
    """
    await db_manager.initialize()
    session = db_manager.get_session()
    try:
        yield session
    finally:
        await session.close()
