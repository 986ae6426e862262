# teamap/users/repository.py
from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from teamap.users.models import User, Follow


async def get_by_username(db: AsyncSession, username: str) -> User | None:
    res = await db.execute(select(User).where(User.username == username.lower()))
    return res.scalar_one_or_none()


async def get_by_email(db: AsyncSession, email: str) -> User | None:
    res = await db.execute(select(User).where(User.email == email.lower()))
    return res.scalar_one_or_none()


async def get_by_id(db: AsyncSession, user_id: int) -> User | None:
    res = await db.execute(select(User).where(User.id == user_id))
    return res.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    username: str,
    email: str,
    hashed_password: str,
    *,
    display_name: str | None = None,
    bio: str | None = None,
) -> User:
    user = User(
        username=username.lower(),
        email=email.lower(),
        hashed_password=hashed_password,
        display_name=display_name,
        bio=bio,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


# -------------------------
# FOLLOWS
# -------------------------
async def is_following(db: AsyncSession, follower_id: int, following_id: int) -> bool:
    res = await db.execute(
        select(Follow.id).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
    )
    return res.first() is not None


async def follow(db: AsyncSession, follower_id: int, following_id: int) -> bool:
    """
    Crea la arista follower → following si no existe.
    Devuelve True si se creó.
    """
    if await is_following(db, follower_id, following_id):
        return False
    db.add(Follow(follower_id=follower_id, following_id=following_id))
    await db.flush()
    return True


async def unfollow(db: AsyncSession, follower_id: int, following_id: int) -> bool:
    res = await db.execute(
        delete(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
    )
    await db.flush()
    return (res.rowcount or 0) > 0


async def count_followers(db: AsyncSession, user_id: int) -> int:
    res = await db.execute(
        select(func.count()).select_from(Follow).where(Follow.following_id == user_id)
    )
    return int(res.scalar_one() or 0)


async def count_following(db: AsyncSession, user_id: int) -> int:
    res = await db.execute(
        select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
    )
    return int(res.scalar_one() or 0)
