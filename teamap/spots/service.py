# teamap/spots/service.py
from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from teamap.activities import repository as activities_repo
from teamap.activities.models import Activity
from teamap.activities.privacy import (
    owner_scope_clause,
    owner_scope_levels,
    viewer_follows,
    visibility_clause,
)
from teamap.activities.service import activity_fields
from teamap.comments.repository import comment_counts
from teamap.core.errors import AuthorizationError, NotFoundError
from teamap.media.repository import delete_spot_media, media_out, replace_spot_images
from teamap.spots import repository as repo
from teamap.spots.models import Spot
from teamap.spots.schemas import SpotCreate
from teamap.users.models import User
from teamap.users.service import user_mini

log = logging.getLogger("uvicorn")

LIST_PREVIEW = 10
PROFILE_PREVIEW = 5


def spot_out(spot: Spot, activity_count: int) -> dict:
    return {
        "id": spot.id,
        "creator_id": spot.creator_id,
        "name": spot.name,
        "description": spot.description,
        "long_description": spot.long_description,
        "latitude": spot.latitude,
        "longitude": spot.longitude,
        "address": spot.address,
        "amenities": spot.amenities,
        "accessibility_info": spot.accessibility_info,
        "image_url": spot.image_url,
        "created_at": spot.created_at,
        "updated_at": spot.updated_at,
        "creator": user_mini(spot.creator),
        "media": [media_out(m) for m in spot.media],
        "activity_count": activity_count,
    }


def _activity_preview(a: Activity) -> dict:
    return {
        "id": a.id,
        "title": a.title,
        "tea_type": a.tea_type,
        "created_at": a.created_at,
        "privacy_level": a.privacy_level,
        "user": user_mini(a.user),
    }


async def list_spots(db: AsyncSession, viewer_id: int | None, search: str | None) -> list[dict]:
    spots = await repo.list_spots(db, search=search)
    ids = [s.id for s in spots]

    totals = await repo.activity_totals(db, ids)
    previews = await repo.recent_activities(
        db, ids, visibility_clause(viewer_id), per_spot=LIST_PREVIEW
    )
    return [
        {
            **spot_out(s, totals.get(s.id, 0)),
            "activities": [_activity_preview(a) for a in previews.get(s.id, [])],
        }
        for s in spots
    ]


async def get_spot_detail(db: AsyncSession, viewer_id: int | None, spot_id: int) -> dict:
    spot = await repo.get_spot(db, spot_id)
    if not spot:
        raise NotFoundError("Spot not found")

    visible = (await repo.recent_activities(db, [spot.id], visibility_clause(viewer_id)))[spot.id]
    ids = [a.id for a in visible]
    likes = await activities_repo.like_counts(db, ids)
    comments = await comment_counts(db, ids)
    totals = await repo.activity_totals(db, [spot.id])

    return {
        **spot_out(spot, totals.get(spot.id, 0)),
        "activities": [
            {
                **activity_fields(a),
                "user": user_mini(a.user),
                "like_count": likes.get(a.id, 0),
                "comment_count": comments.get(a.id, 0),
            }
            for a in visible
        ],
    }


async def list_user_spots(db: AsyncSession, viewer_id: int | None, owner: User) -> list[dict]:
    follows = await viewer_follows(db, viewer_id, owner.id)
    levels = owner_scope_levels(viewer_id, owner.id, follows)

    spots = await repo.list_spots(db, creator_id=owner.id)
    ids = [s.id for s in spots]
    totals = await repo.activity_totals(db, ids)
    previews = await repo.recent_activities(
        db, ids, owner_scope_clause(levels), per_spot=PROFILE_PREVIEW
    )
    return [
        {
            **spot_out(s, totals.get(s.id, 0)),
            "activities": [_activity_preview(a) for a in previews.get(s.id, [])],
        }
        for s in spots
    ]


async def _load_owned(db: AsyncSession, user_id: int, spot_id: int, action: str) -> Spot:
    spot = await repo.get_spot(db, spot_id)
    if not spot:
        raise NotFoundError("Spot not found")
    if spot.creator_id != user_id:
        raise AuthorizationError(f"You can only {action} your own spots")
    return spot


async def create_spot(db: AsyncSession, user_id: int, payload: SpotCreate) -> Spot:
    spot = await repo.create_spot(db, user_id, payload.to_fields())
    if payload.images:
        await replace_spot_images(
            db,
            user_id=user_id,
            spot_id=spot.id,
            spot_name=spot.name,
            images=payload.images,
        )
    await db.commit()
    log.info("spot created id=%s user=%s", spot.id, user_id)
    return await repo.get_spot(db, spot.id)


async def update_spot(db: AsyncSession, user_id: int, spot_id: int, payload: SpotCreate) -> Spot:
    """
    El update del spot y el reemplazo de sus fotos van en UNA transacción:
    o se aplican los dos, o ninguno.
    """
    spot = await _load_owned(db, user_id, spot_id, "update")
    try:
        for key, value in payload.to_fields().items():
            setattr(spot, key, value)
        await db.flush()
        if payload.images is not None:
            await replace_spot_images(
                db,
                user_id=user_id,
                spot_id=spot.id,
                spot_name=spot.name,
                images=payload.images,
            )
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return await repo.get_spot(db, spot.id)


async def delete_spot(db: AsyncSession, user_id: int, spot_id: int) -> None:
    """Las actividades del spot se conservan, sin spot (spot_id = NULL)."""
    spot = await _load_owned(db, user_id, spot_id, "delete")
    await db.execute(update(Activity).where(Activity.spot_id == spot.id).values(spot_id=None))
    await delete_spot_media(db, spot.id)
    await db.delete(spot)
    await db.commit()
    log.info("spot deleted id=%s", spot_id)


async def spot_with_count(db: AsyncSession, spot: Spot) -> dict:
    totals = await repo.activity_totals(db, [spot.id])
    return spot_out(spot, totals.get(spot.id, 0))
