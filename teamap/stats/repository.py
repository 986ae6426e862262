# teamap/stats/repository.py
"""
Consultas de /api/stats. Las ventanas son semiabiertas: since <= created_at < until.
"""
from datetime import datetime

from sqlalchemy import Select, select, func, desc, distinct
from sqlalchemy.ext.asyncio import AsyncSession

from teamap.activities.models import Activity
from teamap.spots.models import Spot


def _window(q: Select, column, since: datetime | None, until: datetime | None) -> Select:
    if since is not None:
        q = q.where(column >= since)
    if until is not None:
        q = q.where(column < until)
    return q


async def count_activities(
    db: AsyncSession,
    *,
    user_id: int | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
) -> int:
    q = select(func.count(Activity.id))
    if user_id is not None:
        q = q.where(Activity.user_id == user_id)
    res = await db.execute(_window(q, Activity.created_at, since, until))
    return int(res.scalar_one() or 0)


async def sum_duration(
    db: AsyncSession,
    *,
    user_id: int,
    since: datetime | None = None,
    until: datetime | None = None,
) -> int:
    # SUM ignora NULL; coalesce para el caso sin filas
    q = select(func.coalesce(func.sum(Activity.duration_minutes), 0)).where(
        Activity.user_id == user_id
    )
    res = await db.execute(_window(q, Activity.created_at, since, until))
    return int(res.scalar_one() or 0)


async def count_spots(
    db: AsyncSession,
    *,
    creator_id: int,
    since: datetime | None = None,
    until: datetime | None = None,
) -> int:
    q = select(func.count(Spot.id)).where(Spot.creator_id == creator_id)
    res = await db.execute(_window(q, Spot.created_at, since, until))
    return int(res.scalar_one() or 0)


async def tea_type_counts(db: AsyncSession, user_id: int) -> list[tuple[str, int]]:
    res = await db.execute(
        select(Activity.tea_type, func.count(Activity.id))
        .where(
            Activity.user_id == user_id,
            Activity.tea_type.is_not(None),
            Activity.tea_type != "",
        )
        .group_by(Activity.tea_type)
    )
    return [(tea, int(n)) for tea, n in res.all()]


async def popular_spots(
    db: AsyncSession,
    *,
    since: datetime,
    until: datetime | None = None,
    limit: int = 5,
) -> list[dict]:
    """
    Spots con más actividades en la ventana, de TODOS los usuarios y sin
    mirar privacy_level. Solo spots con al menos una actividad.
    """
    n = func.count(Activity.id).label("activity_count")
    q = select(Spot.id, Spot.name, n).join(Activity, Activity.spot_id == Spot.id)
    res = await db.execute(
        _window(q, Activity.created_at, since, until)
        .group_by(Spot.id, Spot.name)
        .order_by(desc(n), Spot.id)
        .limit(limit)
    )
    return [
        {"id": sid, "name": name, "activityCount": int(count)}
        for sid, name, count in res.all()
    ]


async def count_active_users(
    db: AsyncSession,
    *,
    since: datetime,
    until: datetime | None = None,
) -> int:
    q = select(func.count(distinct(Activity.user_id)))
    res = await db.execute(_window(q, Activity.created_at, since, until))
    return int(res.scalar_one() or 0)
