# teamap/activities/models.py
from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Integer,
    Text,
    DateTime,
    func,
    ForeignKey,
    UniqueConstraint,
    Index,
)
from teamap.db.base import Base, JSONType, utcnow
from teamap.users.models import User
from teamap.spots.models import Spot
from teamap.media.models import Media


class Activity(Base):
    """
    Una sesión de té. privacy_level es propio de la actividad y NO hereda
    el privacy_level del usuario (ver activities.privacy).
    """
    __tablename__ = "activities"
    __table_args__ = (
        Index("ix_activities_created_id", "created_at", "id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    spot_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("spots.id", ondelete="SET NULL"), nullable=True, index=True
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    tea_type: Mapped[str | None] = mapped_column(String(100), nullable=True, default="")
    tea_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    tea_details: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    mood_before: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    mood_after: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    taste_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    insights: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # minutos; None = no registrado (cuenta como 0 en stats)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    weather_conditions: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    companions: Mapped[list | None] = mapped_column(JSONType, nullable=True)

    privacy_level: Mapped[str] = mapped_column(
        String(16), nullable=False, default="public", server_default="public", index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    user: Mapped[User] = relationship(User, lazy="selectin")
    spot: Mapped[Spot | None] = relationship(Spot, lazy="selectin")
    media: Mapped[list[Media]] = relationship(
        Media,
        primaryjoin="Activity.id == Media.activity_id",
        order_by="Media.id",
        lazy="selectin",
        viewonly=True,
    )


class ActivityLike(Base):
    """
    Like de un usuario sobre una actividad.
    Un usuario solo puede dar like una vez a la misma actividad.
    """
    __tablename__ = "activity_likes"
    __table_args__ = (
        UniqueConstraint("activity_id", "user_id", name="uq_activity_like"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    activity_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("activities.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    user: Mapped[User] = relationship(User, lazy="selectin")
