# teamap/db/session.py
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from teamap.core.config import settings


def build_engine(db_url: str) -> AsyncEngine:
    """
    Un solo engine por proceso. Las opciones dependen del driver:
    el pool solo se dimensiona en Postgres.
    """
    if db_url.startswith("sqlite+aiosqlite"):
        engine = create_async_engine(db_url)

        # sqlite no aplica FKs (ON DELETE ...) si no se lo pedimos
        @event.listens_for(engine.sync_engine, "connect")
        def _fk_pragma(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()

        return engine

    if db_url.startswith("postgresql+psycopg"):
        connect_args = {"connect_timeout": 5}
    elif db_url.startswith("postgresql+asyncpg"):
        connect_args = {
            "timeout": 5,
            "server_settings": {"client_encoding": "UTF8"},
        }
    else:
        connect_args = {}

    return create_async_engine(
        db_url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=5,
        max_overflow=10,
        connect_args=connect_args,
    )


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
