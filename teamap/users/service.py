# teamap/users/service.py
from __future__ import annotations

import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from teamap.core.errors import ConflictError, NotFoundError, ValidationError
from teamap.core.security import hash_password, create_access_token, verify_password
from teamap.users import repository as repo
from teamap.users.models import User
from teamap.users.schemas import (
    ProfileCounts,
    ProfileOut,
    UserCreate,
    UserMini,
    UserOut,
    UserUpdate,
)

log = logging.getLogger("uvicorn")


def user_mini(user: User | None) -> dict | None:
    if user is None:
        return None
    return {
        "id": user.id,
        "username": user.username,
        "display_name": user.display_name,
        "avatar_url": user.avatar_url,
    }


def auth_payload(user: User) -> dict:
    return {
        "user": UserOut.model_validate(user).model_dump(),
        "access_token": create_access_token(sub=str(user.id)),
        "token_type": "bearer",
    }


async def register_user(db: AsyncSession, data: UserCreate) -> User:
    if await repo.get_by_username(db, data.username):
        raise ConflictError("username already exists")
    if await repo.get_by_email(db, data.email):
        raise ConflictError("email already exists")

    user = await repo.create_user(
        db,
        data.username,
        data.email,
        hash_password(data.password),
        display_name=data.display_name or None,
        bio=data.bio or None,
    )
    # El commit lo hace el router
    log.info("user registered id=%s", user.id)
    return user


async def authenticate_user(db: AsyncSession, username_or_email: str, password: str) -> User | None:
    user = await repo.get_by_username(db, username_or_email)
    if not user and "@" in username_or_email:
        user = await repo.get_by_email(db, username_or_email)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


async def update_user(db: AsyncSession, user: User, data: UserUpdate) -> User:
    for field, value in data.model_dump(exclude_unset=True).items():
        if field == "privacy_level" and value is None:
            continue
        setattr(user, field, value)
    await db.flush()
    await db.refresh(user)
    return user


async def get_profile(db: AsyncSession, username: str, viewer_id: int | None) -> dict:
    # import local: spots/activities dependen de users.models
    from teamap.activities.models import Activity
    from teamap.spots.models import Spot

    user = await repo.get_by_username(db, username)
    if not user:
        raise NotFoundError(f'User with username "{username}" does not exist')

    spots = await db.execute(
        select(func.count()).select_from(Spot).where(Spot.creator_id == user.id)
    )
    activities = await db.execute(
        select(func.count()).select_from(Activity).where(Activity.user_id == user.id)
    )
    following_now = bool(viewer_id) and await repo.is_following(db, viewer_id, user.id)

    profile = ProfileOut(
        **UserMini.model_validate(user).model_dump(),
        bio=user.bio,
        privacy_level=user.privacy_level,
        created_at=user.created_at,
        counts=ProfileCounts(
            spots=int(spots.scalar_one() or 0),
            activities=int(activities.scalar_one() or 0),
            followers=await repo.count_followers(db, user.id),
            following=await repo.count_following(db, user.id),
        ),
        is_following=following_now,
    )
    return profile.model_dump()


async def follow_user(db: AsyncSession, viewer: User, username: str) -> dict:
    target = await repo.get_by_username(db, username)
    if not target:
        raise NotFoundError("User not found")
    if target.id == viewer.id:
        raise ValidationError("You cannot follow yourself")

    created = await repo.follow(db, viewer.id, target.id)
    if created:
        log.info("follow %s -> %s", viewer.id, target.id)
    return {"following": True, "user_id": target.id}


async def unfollow_user(db: AsyncSession, viewer: User, username: str) -> dict:
    target = await repo.get_by_username(db, username)
    if not target:
        raise NotFoundError("User not found")

    removed = await repo.unfollow(db, viewer.id, target.id)
    if removed:
        log.info("unfollow %s -> %s", viewer.id, target.id)
    return {"following": False, "user_id": target.id}
