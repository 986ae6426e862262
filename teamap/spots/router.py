# teamap/spots/router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from teamap.core.deps import get_current_user, get_optional_user, viewer_id_of
from teamap.core.errors import NotFoundError
from teamap.core.json import UTF8JSONResponse, success_response
from teamap.db.session import get_session
from teamap.spots import service as svc
from teamap.spots.schemas import SpotCreate
from teamap.users.models import User
from teamap.users.repository import get_by_username
from teamap.users.service import user_mini

router = APIRouter(
    prefix="/api/spots",
    tags=["spots"],
    default_response_class=UTF8JSONResponse,
)


@router.get("")
async def list_spots(
    search: str | None = Query(None, max_length=200),
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
):
    spots = await svc.list_spots(db, viewer_id_of(viewer), search)
    return success_response({"spots": spots}, "Spots retrieved successfully")


@router.get("/user/{username}")
async def user_spots(
    username: str,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
):
    owner = await get_by_username(db, username)
    if not owner:
        raise NotFoundError("User not found")

    spots = await svc.list_user_spots(db, viewer_id_of(viewer), owner)
    return success_response(
        {"spots": spots, "user": {**user_mini(owner), "privacy_level": owner.privacy_level}},
        "User spots retrieved successfully",
    )


@router.get("/{spot_id}")
async def get_spot(
    spot_id: int,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
):
    spot = await svc.get_spot_detail(db, viewer_id_of(viewer), spot_id)
    return success_response({"spot": spot}, "Spot retrieved successfully")


@router.post("")
async def create_spot(
    payload: SpotCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    spot = await svc.create_spot(db, user.id, payload)
    data = await svc.spot_with_count(db, spot)
    return success_response({"spot": data}, "Spot created successfully", 201)


@router.put("/{spot_id}")
async def update_spot(
    spot_id: int,
    payload: SpotCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    spot = await svc.update_spot(db, user.id, spot_id, payload)
    data = await svc.spot_with_count(db, spot)
    return success_response({"spot": data}, "Spot updated successfully")


@router.delete("/{spot_id}")
async def delete_spot(
    spot_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await svc.delete_spot(db, user.id, spot_id)
    return success_response(None, "Spot deleted successfully")
