# teamap/activities/schemas.py
from typing import Any

from pydantic import BaseModel, Field

from teamap.users.schemas import PrivacyLevel


class ActivityCreate(BaseModel):
    """
    Payload de creación/edición.
    En PUT se reemplazan todos los campos (los ausentes vuelven a su default).
    `photos`: lista de URLs ya subidas; si viene (aunque sea vacía) reemplaza
    todas las fotos anteriores.
    """
    spot_id: int | None = None
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    tea_type: str | None = Field(default=None, max_length=100)
    tea_name: str | None = Field(default=None, max_length=200)
    tea_details: dict[str, Any] | None = None
    mood_before: str | None = Field(default=None, max_length=100)
    mood_after: str | None = Field(default=None, max_length=100)
    taste_notes: str | None = Field(default=None, max_length=500)
    insights: str | None = Field(default=None, max_length=1000)
    duration_minutes: int | None = Field(default=None, ge=1, le=1440)  # máx. 24h
    weather_conditions: str | None = Field(default=None, max_length=200)
    companions: list[str] | None = None
    photos: list[str] | None = None
    privacy_level: PrivacyLevel = "public"

    def to_fields(self) -> dict:
        """Columnas de Activity con los defaults de siempre."""
        return {
            "spot_id": self.spot_id or None,
            "title": self.title,
            "description": self.description or "",
            "tea_type": self.tea_type or "",
            "tea_name": self.tea_name or "",
            "tea_details": self.tea_details or {},
            "mood_before": self.mood_before or "",
            "mood_after": self.mood_after or "",
            "taste_notes": self.taste_notes or "",
            "insights": self.insights or "",
            "duration_minutes": self.duration_minutes or None,
            "weather_conditions": self.weather_conditions or "",
            "companions": self.companions or [],
            "privacy_level": self.privacy_level or "public",
        }
