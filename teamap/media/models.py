# teamap/media/models.py
from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    Integer,
    DateTime,
    func,
    ForeignKey,
    CheckConstraint,
)
from teamap.db.base import Base, utcnow


class Media(Base):
    """
    Foto/video colgado de UNA actividad o de UN spot (nunca de ambos).
    file_path es la URL ya subida (Cloudinary u otro); aquí no guardamos binarios.
    """
    __tablename__ = "media"
    __table_args__ = (
        CheckConstraint(
            "(activity_id IS NULL) <> (spot_id IS NULL)",
            name="ck_media_single_owner",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    activity_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("activities.id", ondelete="CASCADE"), nullable=True, index=True
    )
    spot_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("spots.id", ondelete="CASCADE"), nullable=True, index=True
    )

    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    file_type: Mapped[str] = mapped_column(String(16), nullable=False, default="image")
    file_size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    alt_text: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
