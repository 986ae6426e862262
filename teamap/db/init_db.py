import logging
from teamap.db.session import engine
from teamap.db.base import Base

# 👇 importa todos los modelos que deben existir en la DB
from teamap.users.models import User, Follow  # noqa: F401
from teamap.spots.models import Spot  # noqa: F401
from teamap.activities.models import Activity, ActivityLike  # noqa: F401
from teamap.comments.models import ActivityComment  # noqa: F401
from teamap.media.models import Media  # noqa: F401

log = logging.getLogger("uvicorn")


async def init_models():
    """
    Crea/verifica todas las tablas declaradas en Base.metadata
    """
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        log.info("✅ DB init: tablas creadas/verificadas.")
    except Exception as e:
        log.error(f"❌ DB init falló: {e!r}")
        raise


async def dispose_engine():
    await engine.dispose()
    log.info("DB engine cerrado.")
