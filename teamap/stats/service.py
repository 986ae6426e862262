# teamap/stats/service.py
"""
Estadísticas de usuario y del dashboard.
Todo se recalcula en cada request (sin caché), consulta por consulta.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from teamap.stats import repository as repo
from teamap.stats.windows import (
    as_utc,
    end_of_day,
    end_of_month,
    end_of_week,
    local_now,
    rolling_week,
    start_of_day,
    start_of_month,
    start_of_week,
)

POPULAR_SPOTS = 5


def favorite_tea_type(counts: list[tuple[str, int]]) -> str:
    """Moda de tea_type; empate → orden alfabético. "" si no hay ninguno."""
    if not counts:
        return ""
    tea, _ = min(counts, key=lambda tc: (-tc[1], tc[0]))
    return tea


async def get_user_stats(
    db: AsyncSession,
    user_id: int,
    now: datetime | None = None,
) -> dict:
    """Stats del propio usuario: todas sus actividades, sin filtro de privacidad."""
    now = now or local_now()
    week = {"since": as_utc(start_of_week(now)), "until": as_utc(end_of_week(now))}
    month = {"since": as_utc(start_of_month(now)), "until": as_utc(end_of_month(now))}

    return {
        "totalActivities": await repo.count_activities(db, user_id=user_id),
        "totalSpots": await repo.count_spots(db, creator_id=user_id),
        "totalDuration": await repo.sum_duration(db, user_id=user_id),
        "favoriteTeaType": favorite_tea_type(await repo.tea_type_counts(db, user_id)),
        "activitiesThisWeek": await repo.count_activities(db, user_id=user_id, **week),
        "weeklyDuration": await repo.sum_duration(db, user_id=user_id, **week),
        "activitiesThisMonth": await repo.count_activities(db, user_id=user_id, **month),
    }


async def get_dashboard_stats(
    db: AsyncSession,
    viewer_id: int,
    now: datetime | None = None,
) -> dict:
    now = now or local_now()
    week = {"since": as_utc(start_of_week(now)), "until": as_utc(end_of_week(now))}
    last_7_days = {"since": as_utc(rolling_week(now)), "until": as_utc(now)}
    today = {"since": as_utc(start_of_day(now)), "until": as_utc(end_of_day(now))}

    new_spots = await repo.count_spots(db, creator_id=viewer_id, **week)

    return {
        "weeklyStats": {
            "activitiesCount": await repo.count_activities(db, user_id=viewer_id, **week),
            "totalDuration": await repo.sum_duration(db, user_id=viewer_id, **week),
            "newSpots": new_spots,
        },
        "popularSpots": await repo.popular_spots(db, **last_7_days, limit=POPULAR_SPOTS),
        "communityStats": {
            "activeUsers": await repo.count_active_users(db, **last_7_days),
            "sessionsToday": await repo.count_activities(db, **today),
            # mismo valor que weeklyStats.newSpots (spots del viewer), el front lo lee así
            "newSpotsThisWeek": new_spots,
        },
    }
