# teamap/comments/router.py
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from teamap.activities.service import load_visible, pagination
from teamap.comments import repository as repo
from teamap.comments.models import ActivityComment
from teamap.comments.schemas import CommentCreate
from teamap.core.deps import get_current_user, get_optional_user, viewer_id_of
from teamap.core.errors import AuthorizationError, NotFoundError
from teamap.core.json import UTF8JSONResponse, success_response
from teamap.db.session import get_session
from teamap.users.models import User

log = logging.getLogger("uvicorn")

router = APIRouter(
    prefix="/api/activities",
    tags=["comments"],
    default_response_class=UTF8JSONResponse,
)


async def _load_own_comment(
    db: AsyncSession,
    activity_id: int,
    comment_id: int,
    user_id: int,
    action: str,
) -> ActivityComment:
    comment = await repo.get_comment(db, comment_id)
    if not comment:
        raise NotFoundError("Comment not found")
    if comment.activity_id != activity_id:
        raise NotFoundError("Comment not found for this activity")
    if comment.user_id != user_id:
        raise AuthorizationError(f"You can only {action} your own comments")
    return comment


@router.get("/{activity_id}/comments")
async def list_comments(
    activity_id: int,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
):
    await load_visible(
        db,
        viewer_id_of(viewer),
        activity_id,
        "You do not have permission to view comments for this activity",
    )

    comments = await repo.list_activity_comments(
        db, activity_id, limit=limit, offset=(page - 1) * limit
    )
    total = await repo.count_activity_comments(db, activity_id)
    return success_response(
        {
            "data": [repo.comment_out(c) for c in comments],
            "pagination": pagination(page, limit, total),
        },
        "Comments retrieved successfully",
    )


@router.post("/{activity_id}/comments")
async def create_comment(
    activity_id: int,
    payload: CommentCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await load_visible(
        db,
        user.id,
        activity_id,
        "You do not have permission to comment on this activity",
    )

    comment = await repo.create_comment(
        db, user_id=user.id, activity_id=activity_id, content=payload.content
    )
    await db.commit()
    log.info("comment created id=%s activity=%s", comment.id, activity_id)
    return success_response({"comment": repo.comment_out(comment)}, "Comment created successfully", 201)


@router.put("/{activity_id}/comments/{comment_id}")
async def update_comment(
    activity_id: int,
    comment_id: int,
    payload: CommentCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    comment = await _load_own_comment(db, activity_id, comment_id, user.id, "edit")
    comment = await repo.update_comment(db, comment, payload.content)
    await db.commit()
    return success_response({"comment": repo.comment_out(comment)}, "Comment updated successfully")


@router.delete("/{activity_id}/comments/{comment_id}")
async def delete_comment(
    activity_id: int,
    comment_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    comment = await _load_own_comment(db, activity_id, comment_id, user.id, "delete")
    await repo.delete_comment(db, comment)
    await db.commit()
    return success_response(None, "Comment deleted successfully")
