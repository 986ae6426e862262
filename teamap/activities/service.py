# teamap/activities/service.py
"""
Armado del feed de actividades y de la vista de detalle.

Por página se hacen siempre las mismas consultas, sin importar `limit`:
página, total, likes del viewer, conteos de likes, conteos de comentarios
y los 2 comentarios más nuevos de cada actividad.
"""
from __future__ import annotations

import logging
import math

from sqlalchemy import and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from teamap.activities import repository as repo
from teamap.activities.models import Activity
from teamap.activities.privacy import (
    ensure_can_view,
    owner_scope_clause,
    owner_scope_levels,
    viewer_follows,
    visibility_clause,
)
from teamap.activities.schemas import ActivityCreate
from teamap.comments import repository as comments_repo
from teamap.core.errors import AuthorizationError, NotFoundError
from teamap.media.repository import add_activity_photos, media_out, replace_activity_photos
from teamap.spots.models import Spot
from teamap.spots.repository import get_spot, spot_mini
from teamap.users.models import User
from teamap.users.service import user_mini

log = logging.getLogger("uvicorn")

PREVIEW_COMMENTS = 2


def activity_fields(a: Activity) -> dict:
    return {
        "id": a.id,
        "user_id": a.user_id,
        "spot_id": a.spot_id,
        "title": a.title,
        "description": a.description,
        "tea_type": a.tea_type,
        "tea_name": a.tea_name,
        "tea_details": a.tea_details,
        "mood_before": a.mood_before,
        "mood_after": a.mood_after,
        "taste_notes": a.taste_notes,
        "insights": a.insights,
        "duration_minutes": a.duration_minutes,
        "weather_conditions": a.weather_conditions,
        "companions": a.companions,
        "privacy_level": a.privacy_level,
        "created_at": a.created_at,
        "updated_at": a.updated_at,
    }


def pagination(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


# -------------------------
# FEED
# -------------------------
def feed_condition(
    viewer_id: int | None,
    *,
    spot_id: int | None = None,
    owner_id: int | None = None,
    follows_owner: bool = False,
) -> ColumnElement[bool]:
    """
    - global:      regla de visibilidad
    - spot X:      regla de visibilidad AND spot_id = X
    - usuario X:   user_id = X AND privacy_level IN niveles permitidos
    """
    if owner_id is not None:
        levels = owner_scope_levels(viewer_id, owner_id, follows_owner)
        return and_(Activity.user_id == owner_id, owner_scope_clause(levels))

    cond = visibility_clause(viewer_id)
    if spot_id is not None:
        cond = and_(Activity.spot_id == spot_id, cond)
    return cond


async def hydrate_page(
    db: AsyncSession,
    activities: list[Activity],
    viewer_id: int | None,
) -> list[dict]:
    ids = [a.id for a in activities]

    liked = await repo.liked_activity_ids(db, viewer_id, ids)
    likes = await repo.like_counts(db, ids)
    comments = await comments_repo.comment_counts(db, ids)
    previews = await comments_repo.recent_comments(db, ids, PREVIEW_COMMENTS)

    items: list[dict] = []
    for a in activities:
        items.append(
            {
                **activity_fields(a),
                "user": user_mini(a.user),
                "spot": spot_mini(a.spot),
                "media": [media_out(m) for m in a.media],
                "comments": [comments_repo.comment_out(c) for c in previews.get(a.id, [])],
                "is_liked": a.id in liked,
                "like_count": likes.get(a.id, 0),
                "comment_count": comments.get(a.id, 0),
            }
        )
    return items


async def list_activities(
    db: AsyncSession,
    viewer_id: int | None,
    *,
    spot_id: int | None = None,
    owner_id: int | None = None,
    follows_owner: bool = False,
    page: int = 1,
    limit: int = 20,
) -> dict:
    cond = feed_condition(
        viewer_id,
        spot_id=spot_id,
        owner_id=owner_id,
        follows_owner=follows_owner,
    )

    rows = await repo.list_page(db, cond, limit=limit, offset=(page - 1) * limit)
    total = await repo.count_matching(db, cond)

    return {
        "data": await hydrate_page(db, rows, viewer_id),
        "pagination": pagination(page, limit, total),
    }


async def list_spot_activities(
    db: AsyncSession,
    viewer_id: int | None,
    spot_id: int,
    *,
    page: int,
    limit: int,
) -> dict:
    spot = await get_spot(db, spot_id)
    if not spot:
        raise NotFoundError("Spot not found")

    out = await list_activities(db, viewer_id, spot_id=spot.id, page=page, limit=limit)
    out["spot"] = spot_mini(spot)
    return out


async def list_user_activities(
    db: AsyncSession,
    viewer_id: int | None,
    owner: User,
    *,
    page: int,
    limit: int,
) -> dict:
    follows = await viewer_follows(db, viewer_id, owner.id)
    out = await list_activities(
        db,
        viewer_id,
        owner_id=owner.id,
        follows_owner=follows,
        page=page,
        limit=limit,
    )
    out["user"] = {
        **user_mini(owner),
        "privacy_level": owner.privacy_level,
    }
    return out


# -------------------------
# DETALLE
# -------------------------
async def load_visible(
    db: AsyncSession,
    viewer_id: int | None,
    activity_id: int,
    denied_message: str = "You do not have permission to view this activity",
) -> Activity:
    """404 si no existe, 403 si el viewer no la puede ver."""
    activity = await repo.get_activity(db, activity_id)
    if not activity:
        raise NotFoundError("Activity not found")
    await ensure_can_view(db, viewer_id, activity, denied_message)
    return activity


async def get_activity_detail(db: AsyncSession, viewer_id: int | None, activity_id: int) -> dict:
    activity = await load_visible(db, viewer_id, activity_id)

    comments = await comments_repo.list_activity_comments(db, activity.id)
    likes = await repo.list_likes(db, activity.id)
    liked = await repo.liked_activity_ids(db, viewer_id, [activity.id])

    return {
        **activity_fields(activity),
        "user": {**user_mini(activity.user), "bio": activity.user.bio},
        "spot": spot_mini(activity.spot, detailed=True),
        "media": [media_out(m) for m in activity.media],
        "comments": [comments_repo.comment_out(c) for c in comments],
        "likes": [{"id": lk.id, "user": user_mini(lk.user)} for lk in likes],
        "is_liked": activity.id in liked,
        "like_count": len(likes),
        "comment_count": len(comments),
    }


async def activity_out(db: AsyncSession, activity: Activity, viewer_id: int | None) -> dict:
    """Forma de respuesta tras crear/editar: como un item del feed."""
    items = await hydrate_page(db, [activity], viewer_id)
    return items[0]


# -------------------------
# MUTACIONES
# -------------------------
async def _ensure_spot(db: AsyncSession, spot_id: int | None) -> Spot | None:
    if not spot_id:
        return None
    spot = await get_spot(db, spot_id)
    if not spot:
        raise NotFoundError("Spot not found")
    return spot


async def _load_owned(db: AsyncSession, user_id: int, activity_id: int, action: str) -> Activity:
    activity = await repo.get_activity(db, activity_id)
    if not activity:
        raise NotFoundError("Activity not found")
    if activity.user_id != user_id:
        raise AuthorizationError(f"You can only {action} your own activities")
    return activity


async def create_activity(db: AsyncSession, user_id: int, payload: ActivityCreate) -> Activity:
    await _ensure_spot(db, payload.spot_id)

    activity = await repo.create_activity(db, user_id, payload.to_fields())
    # la actividad queda confirmada antes que sus fotos
    await db.commit()
    log.info("activity created id=%s user=%s", activity.id, user_id)

    if payload.photos:
        await add_activity_photos(
            db,
            user_id=user_id,
            activity_id=activity.id,
            title=payload.title,
            photos=payload.photos,
        )
        await db.commit()

    return await repo.get_activity(db, activity.id)


async def update_activity(
    db: AsyncSession,
    user_id: int,
    activity_id: int,
    payload: ActivityCreate,
) -> Activity:
    activity = await _load_owned(db, user_id, activity_id, "update")
    await _ensure_spot(db, payload.spot_id)

    await repo.update_activity(db, activity, payload.to_fields())
    await db.commit()

    if payload.photos is not None:
        await replace_activity_photos(
            db,
            user_id=user_id,
            activity_id=activity.id,
            title=payload.title,
            photos=payload.photos,
        )
        await db.commit()

    return await repo.get_activity(db, activity.id)


async def delete_activity(db: AsyncSession, user_id: int, activity_id: int) -> None:
    activity = await _load_owned(db, user_id, activity_id, "delete")
    await repo.delete_activity(db, activity)
    await db.commit()
    log.info("activity deleted id=%s", activity_id)


async def toggle_like(db: AsyncSession, user_id: int, activity_id: int) -> dict:
    await load_visible(
        db,
        user_id,
        activity_id,
        "You do not have permission to like this activity",
    )
    liked, total = await repo.toggle_like(db, activity_id, user_id)
    await db.commit()
    log.info("like toggled activity=%s user=%s liked=%s", activity_id, user_id, liked)
    return {"liked": liked, "like_count": total}
