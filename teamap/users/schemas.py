# teamap/users/schemas.py
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

PrivacyLevel = Literal["public", "friends", "private"]


class UserCreate(BaseModel):
    email: EmailStr = Field(..., max_length=255)
    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9]+$")
    password: str = Field(..., min_length=8, max_length=128)
    display_name: str | None = Field(default=None, max_length=50)
    bio: str | None = Field(default=None, max_length=500)


class UserUpdate(BaseModel):
    display_name: str | None = Field(default=None, max_length=50)
    bio: str | None = Field(default=None, max_length=500)
    avatar_url: str | None = Field(default=None, max_length=500)
    privacy_level: PrivacyLevel | None = None


class UserMini(BaseModel):
    """Campos públicos de un usuario (autor de actividad, comentario, like...)."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    display_name: str | None = None
    avatar_url: str | None = None


class UserOut(UserMini):
    email: EmailStr
    bio: str | None = None
    privacy_level: PrivacyLevel
    created_at: datetime


class ProfileCounts(BaseModel):
    spots: int
    activities: int
    followers: int
    following: int


class ProfileOut(UserMini):
    bio: str | None = None
    privacy_level: PrivacyLevel
    created_at: datetime
    counts: ProfileCounts
    is_following: bool = False
