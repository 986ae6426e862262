# alembic/env.py
from __future__ import annotations

import sys
from pathlib import Path
from logging.config import fileConfig

from sqlalchemy import create_engine
from alembic import context

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from teamap.core.config import settings
from teamap.db.base import Base
import teamap.db.init_db  # noqa: F401  (registra todos los modelos)

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)


def sync_url(url: str) -> str:
    """
    La app usa drivers async; alembic corre síncrono.
      postgresql+asyncpg  -> postgresql+psycopg
      sqlite+aiosqlite    -> sqlite
    """
    if url.startswith("sqlite"):
        return url.replace("+aiosqlite", "")
    if "+asyncpg" in url:
        return url.replace("+asyncpg", "+psycopg")
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


URL = sync_url(settings.DATABASE_URL)


def _configure(**kw) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        # SQLite no soporta ALTER COLUMN: batch mode recrea la tabla
        render_as_batch=URL.startswith("sqlite"),
        **kw,
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    _configure(url=URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
else:
    engine = create_engine(URL)
    with engine.connect() as connection:
        _configure(connection=connection)
    engine.dispose()
