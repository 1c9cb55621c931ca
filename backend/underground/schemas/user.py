from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional

from underground.schemas.auth import Coordinates, SessionUser

# Google Maps "<color>-dot.png" marker icons
MARKER_COLORS = ["red", "blue", "green", "yellow", "purple", "orange", "pink", "ltblue"]


class ProfileUpdate(BaseModel):
    """Partial profile update; only fields present in the body are applied."""
    full_name: Optional[str] = Field(None, alias="fullName", max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    coordinates: Optional[Coordinates] = None
    marker_color: Optional[str] = Field(None, alias="markerColor")
    profile_photo: Optional[str] = Field(None, alias="profilePhoto")

    class Config:
        populate_by_name = True

    @field_validator('marker_color')
    @classmethod
    def validate_marker_color(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in MARKER_COLORS:
            raise ValueError(f'Marker color must be one of: {MARKER_COLORS}')
        return v


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword")

    class Config:
        populate_by_name = True


class AdminUser(SessionUser):
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class AdminFlagUpdate(BaseModel):
    is_admin: bool = Field(..., alias="isAdmin")

    class Config:
        populate_by_name = True
