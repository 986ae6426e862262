# teamap/comments/repository.py
from __future__ import annotations

from collections import defaultdict

from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from teamap.comments.models import ActivityComment
from teamap.users.service import user_mini


def comment_out(c: ActivityComment) -> dict:
    return {
        "id": c.id,
        "activity_id": c.activity_id,
        "content": c.content,
        "created_at": c.created_at,
        "updated_at": c.updated_at,
        "user": user_mini(c.user),
    }


async def create_comment(
    db: AsyncSession,
    *,
    user_id: int,
    activity_id: int,
    content: str,
) -> ActivityComment:
    c = ActivityComment(user_id=user_id, activity_id=activity_id, content=content)
    db.add(c)
    await db.flush()
    return await get_comment(db, c.id)


async def get_comment(db: AsyncSession, comment_id: int) -> ActivityComment | None:
    res = await db.execute(
        select(ActivityComment)
        .where(ActivityComment.id == comment_id)
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


async def update_comment(db: AsyncSession, comment: ActivityComment, content: str) -> ActivityComment:
    comment.content = content
    await db.flush()
    return await get_comment(db, comment.id)


async def delete_comment(db: AsyncSession, comment: ActivityComment) -> None:
    await db.execute(delete(ActivityComment).where(ActivityComment.id == comment.id))
    await db.flush()


async def list_activity_comments(
    db: AsyncSession,
    activity_id: int,
    *,
    limit: int | None = None,
    offset: int = 0,
) -> list[ActivityComment]:
    # orden cronológico (y por id para desempatar)
    q = (
        select(ActivityComment)
        .where(ActivityComment.activity_id == activity_id)
        .order_by(ActivityComment.created_at.asc(), ActivityComment.id.asc())
        .offset(offset)
    )
    if limit is not None:
        q = q.limit(limit)
    res = await db.execute(q)
    return list(res.scalars())


async def count_activity_comments(db: AsyncSession, activity_id: int) -> int:
    res = await db.execute(
        select(func.count()).select_from(ActivityComment).where(ActivityComment.activity_id == activity_id)
    )
    return int(res.scalar_one() or 0)


async def comment_counts(db: AsyncSession, activity_ids: list[int]) -> dict[int, int]:
    if not activity_ids:
        return {}
    res = await db.execute(
        select(ActivityComment.activity_id, func.count(ActivityComment.id))
        .where(ActivityComment.activity_id.in_(activity_ids))
        .group_by(ActivityComment.activity_id)
    )
    return {aid: int(n) for aid, n in res.all()}


async def recent_comments(
    db: AsyncSession,
    activity_ids: list[int],
    per_activity: int = 2,
) -> dict[int, list[ActivityComment]]:
    """
    Los `per_activity` comentarios más nuevos de cada actividad (más nuevo primero),
    en una sola consulta con row_number() OVER (PARTITION BY activity_id).
    """
    if not activity_ids:
        return {}

    rn = (
        func.row_number()
        .over(
            partition_by=ActivityComment.activity_id,
            order_by=(ActivityComment.created_at.desc(), ActivityComment.id.desc()),
        )
        .label("rn")
    )
    ranked = (
        select(ActivityComment.id.label("cid"), rn)
        .where(ActivityComment.activity_id.in_(activity_ids))
        .subquery()
    )
    q = (
        select(ActivityComment)
        .join(ranked, ranked.c.cid == ActivityComment.id)
        .where(ranked.c.rn <= per_activity)
        .order_by(
            ActivityComment.activity_id,
            ActivityComment.created_at.desc(),
            ActivityComment.id.desc(),
        )
    )
    res = await db.execute(q)

    grouped: dict[int, list[ActivityComment]] = defaultdict(list)
    for c in res.scalars():
        grouped[c.activity_id].append(c)
    return dict(grouped)
