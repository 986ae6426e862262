# teamap/activities/repository.py
from sqlalchemy import select, desc, func, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from teamap.activities.models import Activity, ActivityLike
from teamap.comments.models import ActivityComment
from teamap.media.repository import delete_activity_media


# -------------------------
# ACTIVITIES
# -------------------------
async def get_activity(db: AsyncSession, activity_id: int) -> Activity | None:
    # populate_existing: recarga media/spot aunque el objeto ya esté en la sesión
    res = await db.execute(
        select(Activity)
        .where(Activity.id == activity_id)
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


async def list_page(
    db: AsyncSession,
    condition: ColumnElement[bool],
    *,
    limit: int,
    offset: int,
) -> list[Activity]:
    q = (
        select(Activity)
        .where(condition)
        .order_by(desc(Activity.created_at), desc(Activity.id))
        .limit(limit)
        .offset(offset)
    )
    res = await db.execute(q)
    return list(res.scalars())


async def count_matching(db: AsyncSession, condition: ColumnElement[bool]) -> int:
    res = await db.execute(select(func.count()).select_from(Activity).where(condition))
    return int(res.scalar_one() or 0)


async def create_activity(db: AsyncSession, user_id: int, fields: dict) -> Activity:
    activity = Activity(user_id=user_id, **fields)
    db.add(activity)
    await db.flush()
    return activity


async def update_activity(db: AsyncSession, activity: Activity, fields: dict) -> Activity:
    for key, value in fields.items():
        setattr(activity, key, value)
    await db.flush()
    return activity


async def delete_activity(db: AsyncSession, activity: Activity) -> None:
    """Borra likes, comentarios y media de la actividad, y luego la actividad."""
    await db.execute(delete(ActivityLike).where(ActivityLike.activity_id == activity.id))
    await db.execute(delete(ActivityComment).where(ActivityComment.activity_id == activity.id))
    await delete_activity_media(db, activity.id)
    await db.delete(activity)
    await db.flush()


# -------------------------
# ❤️ LIKES
# -------------------------
async def count_likes(db: AsyncSession, activity_id: int) -> int:
    q = select(func.count()).select_from(ActivityLike).where(ActivityLike.activity_id == activity_id)
    res = await db.execute(q)
    return int(res.scalar_one() or 0)


async def like_counts(db: AsyncSession, activity_ids: list[int]) -> dict[int, int]:
    if not activity_ids:
        return {}
    res = await db.execute(
        select(ActivityLike.activity_id, func.count(ActivityLike.id))
        .where(ActivityLike.activity_id.in_(activity_ids))
        .group_by(ActivityLike.activity_id)
    )
    return {aid: int(n) for aid, n in res.all()}


async def liked_activity_ids(
    db: AsyncSession,
    viewer_id: int | None,
    activity_ids: list[int],
) -> set[int]:
    """
    Cuáles de estas actividades ya tienen like del viewer.
    Una sola consulta para toda la página.
    """
    if not viewer_id or not activity_ids:
        return set()
    res = await db.execute(
        select(ActivityLike.activity_id).where(
            ActivityLike.user_id == viewer_id,
            ActivityLike.activity_id.in_(activity_ids),
        )
    )
    return {row[0] for row in res.all()}


async def list_likes(db: AsyncSession, activity_id: int) -> list[ActivityLike]:
    res = await db.execute(
        select(ActivityLike)
        .where(ActivityLike.activity_id == activity_id)
        .order_by(ActivityLike.created_at.asc(), ActivityLike.id.asc())
    )
    return list(res.scalars())


async def toggle_like(
    db: AsyncSession,
    activity_id: int,
    user_id: int,
) -> tuple[bool, int]:
    """
    Activa/desactiva el like de un usuario sobre una actividad.
    Devuelve (liked, total_likes).
    Si dos requests crean el mismo like a la vez, la UniqueConstraint
    hace fallar una de ellas (IntegrityError → 409).
    """
    q = select(ActivityLike).where(
        ActivityLike.activity_id == activity_id,
        ActivityLike.user_id == user_id,
    )
    res = await db.execute(q)
    existing = res.scalar_one_or_none()

    if existing:
        # quitar
        await db.execute(delete(ActivityLike).where(ActivityLike.id == existing.id))
        await db.flush()
        total = await count_likes(db, activity_id)
        return False, total

    # crear
    db.add(ActivityLike(activity_id=activity_id, user_id=user_id))
    await db.flush()
    total = await count_likes(db, activity_id)
    return True, total
