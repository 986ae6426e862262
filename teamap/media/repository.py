# teamap/media/repository.py
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from teamap.media.models import Media


def media_out(m: Media) -> dict:
    return {
        "id": m.id,
        "file_path": m.file_path,
        "file_type": m.file_type,
        "alt_text": m.alt_text,
        "created_at": m.created_at,
    }


async def add_activity_photos(
    db: AsyncSession,
    *,
    user_id: int,
    activity_id: int,
    title: str,
    photos: list[str],
) -> None:
    # file_size = 0: solo tenemos la URL ya subida
    db.add_all(
        [
            Media(
                user_id=user_id,
                activity_id=activity_id,
                file_path=url,
                file_type="image",
                file_size=0,
                alt_text=f"Activity photo for {title}",
            )
            for url in photos
        ]
    )
    await db.flush()


async def replace_activity_photos(
    db: AsyncSession,
    *,
    user_id: int,
    activity_id: int,
    title: str,
    photos: list[str],
) -> None:
    """Borra TODAS las imágenes de la actividad y crea las nuevas (no hay merge)."""
    await db.execute(
        delete(Media).where(
            Media.activity_id == activity_id,
            Media.file_type == "image",
        )
    )
    if photos:
        await add_activity_photos(
            db, user_id=user_id, activity_id=activity_id, title=title, photos=photos
        )
    await db.flush()


async def delete_activity_media(db: AsyncSession, activity_id: int) -> None:
    await db.execute(delete(Media).where(Media.activity_id == activity_id))


async def replace_spot_images(
    db: AsyncSession,
    *,
    user_id: int,
    spot_id: int,
    spot_name: str,
    images: list[str],
) -> None:
    await db.execute(delete(Media).where(Media.spot_id == spot_id))
    db.add_all(
        [
            Media(
                user_id=user_id,
                spot_id=spot_id,
                file_path=url,
                file_type="image",
                file_size=0,
                alt_text=f"Spot photo for {spot_name}",
            )
            for url in images
        ]
    )
    await db.flush()


async def delete_spot_media(db: AsyncSession, spot_id: int) -> None:
    await db.execute(delete(Media).where(Media.spot_id == spot_id))
