# teamap/spots/repository.py
from sqlalchemy import select, desc, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from teamap.activities.models import Activity
from teamap.spots.models import Spot


def spot_mini(spot: Spot | None, *, detailed: bool = False) -> dict | None:
    if spot is None:
        return None
    out = {
        "id": spot.id,
        "name": spot.name,
        "latitude": spot.latitude,
        "longitude": spot.longitude,
        "address": spot.address,
    }
    if detailed:
        out["description"] = spot.description
        out["amenities"] = spot.amenities
    return out


async def get_spot(db: AsyncSession, spot_id: int) -> Spot | None:
    res = await db.execute(
        select(Spot)
        .where(Spot.id == spot_id)
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


async def list_spots(
    db: AsyncSession,
    *,
    search: str | None = None,
    creator_id: int | None = None,
) -> list[Spot]:
    q = select(Spot).order_by(desc(Spot.created_at), desc(Spot.id))
    if search:
        # % y _ se buscan literalmente
        needle = search.lower()
        q = q.where(
            or_(
                func.lower(Spot.name).contains(needle, autoescape=True),
                func.lower(Spot.description).contains(needle, autoescape=True),
                func.lower(Spot.address).contains(needle, autoescape=True),
            )
        )
    if creator_id is not None:
        q = q.where(Spot.creator_id == creator_id)
    res = await db.execute(q)
    return list(res.scalars())


async def create_spot(db: AsyncSession, creator_id: int, fields: dict) -> Spot:
    spot = Spot(creator_id=creator_id, **fields)
    db.add(spot)
    await db.flush()
    return spot


async def activity_totals(db: AsyncSession, spot_ids: list[int]) -> dict[int, int]:
    """Total de actividades por spot (sin filtrar privacidad, como _count)."""
    if not spot_ids:
        return {}
    res = await db.execute(
        select(Activity.spot_id, func.count(Activity.id))
        .where(Activity.spot_id.in_(spot_ids))
        .group_by(Activity.spot_id)
    )
    return {sid: int(n) for sid, n in res.all()}


async def recent_activities(
    db: AsyncSession,
    spot_ids: list[int],
    condition: ColumnElement[bool],
    per_spot: int | None = None,
) -> dict[int, list[Activity]]:
    """
    Actividades visibles de cada spot, más nuevas primero.
    Con `per_spot` se corta a las N más nuevas por spot (row_number).
    """
    if not spot_ids:
        return {}

    base = Activity.spot_id.in_(spot_ids) & condition
    if per_spot is None:
        q = (
            select(Activity)
            .where(base)
            .order_by(desc(Activity.created_at), desc(Activity.id))
        )
    else:
        rn = (
            func.row_number()
            .over(
                partition_by=Activity.spot_id,
                order_by=(Activity.created_at.desc(), Activity.id.desc()),
            )
            .label("rn")
        )
        ranked = select(Activity.id.label("aid"), rn).where(base).subquery()
        q = (
            select(Activity)
            .join(ranked, ranked.c.aid == Activity.id)
            .where(ranked.c.rn <= per_spot)
            .order_by(desc(Activity.created_at), desc(Activity.id))
        )

    res = await db.execute(q)
    grouped: dict[int, list[Activity]] = {sid: [] for sid in spot_ids}
    for a in res.scalars():
        grouped[a.spot_id].append(a)
    return grouped
