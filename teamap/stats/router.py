# teamap/stats/router.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from teamap.core.deps import get_current_user
from teamap.core.json import UTF8JSONResponse, success_response
from teamap.db.session import get_session
from teamap.stats import service as svc
from teamap.users.models import User

router = APIRouter(
    prefix="/api/stats",
    tags=["stats"],
    default_response_class=UTF8JSONResponse,
)


@router.get("/dashboard")
async def dashboard(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    stats = await svc.get_dashboard_stats(db, user.id)
    return success_response(stats, "Dashboard statistics retrieved successfully")


@router.get("/user/{user_id}")
async def user_stats(
    user_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """
    Siempre devuelve las stats del usuario autenticado.
    `user_id` se acepta por compatibilidad con el front, pero no se usa.
    """
    stats = await svc.get_user_stats(db, user.id)
    return success_response(stats, "User statistics retrieved successfully")
