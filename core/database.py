from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import settings


def _install_sqlite_hooks(engine: AsyncEngine) -> None:
    """
    SQLite не выполняет каскады FOREIGN KEY без PRAGMA, а отложенный BEGIN
    позволяет двум писателям читать один и тот же снимок. Поэтому каждая
    транзакция начинается с BEGIN IMMEDIATE и сразу берёт блокировку записи.
    Сессия начинает транзакцию на первом SELECT, так что на SQLite даже
    GET-запросы выполняются по очереди; для PostgreSQL хуки не ставятся.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # драйвер не должен сам отправлять BEGIN, см. _on_begin
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str, **kwargs) -> AsyncEngine:
    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=False, future=True, **kwargs)
        _install_sqlite_hooks(engine)
        return engine

    return create_async_engine(
        url,
        echo=False,
        future=True,
        pool_pre_ping=True,
        **kwargs,
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = build_sessionmaker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Асинхронный генератор сессии.
    Используется как Depends(get_db) в роутерах.
    """
    async with AsyncSessionLocal() as session:
        yield session
