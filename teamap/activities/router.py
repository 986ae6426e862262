# teamap/activities/router.py
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from teamap.activities import service as svc
from teamap.activities.schemas import ActivityCreate
from teamap.core.config import settings
from teamap.core.deps import get_current_user, get_optional_user, viewer_id_of
from teamap.core.errors import NotFoundError
from teamap.core.json import UTF8JSONResponse, success_response
from teamap.db.session import get_session
from teamap.users.models import User
from teamap.users.repository import get_by_username

router = APIRouter(
    prefix="/api/activities",
    tags=["activities"],
    default_response_class=UTF8JSONResponse,
)

Page = Annotated[int, Query(ge=1)]
Limit = Annotated[int, Query(ge=1, le=settings.FEED_MAX_LIMIT)]


@router.get("")
async def feed(
    page: Page = 1,
    limit: Limit = settings.FEED_DEFAULT_LIMIT,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
):
    """Feed global: públicas + propias + "friends" de la gente que sigo."""
    data = await svc.list_activities(db, viewer_id_of(viewer), page=page, limit=limit)
    return success_response(data, "Activities retrieved successfully")


@router.get("/spot/{spot_id}")
async def spot_feed(
    spot_id: int,
    page: Page = 1,
    limit: Limit = settings.FEED_DEFAULT_LIMIT,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
):
    data = await svc.list_spot_activities(
        db, viewer_id_of(viewer), spot_id, page=page, limit=limit
    )
    return success_response(data, "Spot activities retrieved successfully")


@router.get("/user/{username}")
async def user_feed(
    username: str,
    page: Page = 1,
    limit: Limit = settings.FEED_DEFAULT_LIMIT,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
):
    owner = await get_by_username(db, username)
    if not owner:
        raise NotFoundError("User not found")

    data = await svc.list_user_activities(
        db, viewer_id_of(viewer), owner, page=page, limit=limit
    )
    return success_response(data, "User activities retrieved successfully")


@router.get("/{activity_id}")
async def get_activity(
    activity_id: int,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
):
    activity = await svc.get_activity_detail(db, viewer_id_of(viewer), activity_id)
    return success_response({"activity": activity}, "Activity retrieved successfully")


@router.post("")
async def create_activity(
    payload: ActivityCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    activity = await svc.create_activity(db, user.id, payload)
    data = await svc.activity_out(db, activity, user.id)
    return success_response({"activity": data}, "Activity created successfully", 201)


@router.put("/{activity_id}")
async def update_activity(
    activity_id: int,
    payload: ActivityCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    activity = await svc.update_activity(db, user.id, activity_id, payload)
    data = await svc.activity_out(db, activity, user.id)
    return success_response({"activity": data}, "Activity updated successfully")


@router.delete("/{activity_id}")
async def delete_activity(
    activity_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await svc.delete_activity(db, user.id, activity_id)
    return success_response(None, "Activity deleted successfully")


@router.post("/{activity_id}/like")
async def toggle_like(
    activity_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    data = await svc.toggle_like(db, user.id, activity_id)
    message = "Activity liked successfully" if data["liked"] else "Activity unliked successfully"
    return success_response(data, message)
