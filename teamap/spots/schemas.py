# teamap/spots/schemas.py
from typing import Any

from pydantic import BaseModel, Field, HttpUrl, field_validator


class SpotCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=500)
    long_description: str | None = Field(default=None, max_length=2000)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str | None = Field(default=None, max_length=500)
    amenities: list[str] | dict[str, Any] | None = None
    accessibility_info: str | None = Field(default=None, max_length=1000)
    image_url: HttpUrl | None = None
    # URLs ya subidas; en PUT reemplazan todas las fotos del spot
    images: list[str] | None = None

    @field_validator("image_url", mode="before")
    @classmethod
    def _blank_url(cls, v):
        return v or None

    def to_fields(self) -> dict:
        return {
            "name": self.name,
            "description": self.description or "",
            "long_description": self.long_description or "",
            "latitude": self.latitude,
            "longitude": self.longitude,
            "address": self.address or "",
            "amenities": self.amenities if self.amenities is not None else [],
            "accessibility_info": self.accessibility_info or "",
            "image_url": str(self.image_url) if self.image_url else "",
        }
