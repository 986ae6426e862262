# teamap/activities/privacy.py
"""
Quién puede ver qué.

Una actividad es visible para `viewer` si se cumple alguna de:

1. privacy_level == "public"
2. viewer es el dueño
3. privacy_level == "friends" y viewer SIGUE al dueño (viewer → dueño;
   que el dueño siga al viewer no cuenta)

"private" solo lo ve el dueño. Un visitante anónimo (None) solo ve "public".

La misma regla existe en dos formas: `can_view` (Python puro, para una fila
ya cargada) y `visibility_clause` (expresión SQL, para listados).
"""
from sqlalchemy import and_, exists, false, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from teamap.activities.models import Activity
from teamap.core.errors import AuthorizationError
from teamap.users.models import Follow
from teamap.users.repository import is_following


def can_view(
    viewer_id: int | None,
    owner_id: int,
    privacy_level: str,
    follows_owner: bool = False,
) -> bool:
    if privacy_level == "public":
        return True
    if viewer_id is None:
        return False
    if viewer_id == owner_id:
        return True
    return privacy_level == "friends" and follows_owner


def visibility_clause(viewer_id: int | None) -> ColumnElement[bool]:
    if viewer_id is None:
        return Activity.privacy_level == "public"

    follows_owner = exists(
        select(Follow.id).where(
            Follow.follower_id == viewer_id,
            Follow.following_id == Activity.user_id,
        )
    )
    return or_(
        Activity.privacy_level == "public",
        Activity.user_id == viewer_id,
        and_(Activity.privacy_level == "friends", follows_owner),
    )


def owner_scope_levels(
    viewer_id: int | None,
    owner_id: int,
    follows_owner: bool = False,
) -> list[str]:
    """
    Niveles visibles al navegar el perfil de UN dueño concreto.
    El dueño ve también sus "private".
    """
    levels = ["public"]
    is_owner = viewer_id is not None and viewer_id == owner_id
    if is_owner or (viewer_id is not None and follows_owner):
        levels.append("friends")
    if is_owner:
        levels.append("private")
    return levels


def owner_scope_clause(levels: list[str]) -> ColumnElement[bool]:
    if not levels:
        return false()
    return Activity.privacy_level.in_(levels)


async def viewer_follows(db: AsyncSession, viewer_id: int | None, owner_id: int) -> bool:
    if viewer_id is None or viewer_id == owner_id:
        return False
    return await is_following(db, viewer_id, owner_id)


async def ensure_can_view(
    db: AsyncSession,
    viewer_id: int | None,
    activity: Activity,
    message: str = "You do not have permission to view this activity",
) -> None:
    follows = False
    if activity.privacy_level == "friends":
        follows = await viewer_follows(db, viewer_id, activity.user_id)
    if not can_view(viewer_id, activity.user_id, activity.privacy_level, follows):
        raise AuthorizationError(message)
