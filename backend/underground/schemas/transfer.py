from pydantic import BaseModel, Field, field_validator
from typing import Dict, Literal, Optional

from underground.core.security import is_password_hash
from underground.schemas.auth import Coordinates
from underground.schemas.user import MARKER_COLORS


class ImportedUser(BaseModel):
    """One user record in an export file, keyed by username in the enclosing map."""
    username: Optional[str] = None
    password_hash: str = Field(..., alias="passwordHash")
    full_name: str = Field("", alias="fullName")
    location: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    marker_color: str = Field("red", alias="markerColor")
    profile_photo: Optional[str] = Field(None, alias="profilePhoto")
    is_admin: bool = Field(False, alias="isAdmin")

    class Config:
        populate_by_name = True

    @field_validator('password_hash')
    @classmethod
    def validate_password_hash(cls, v: str) -> str:
        if not is_password_hash(v):
            raise ValueError('passwordHash must be a bcrypt hash')
        return v

    @field_validator('marker_color')
    @classmethod
    def validate_marker_color(cls, v: str) -> str:
        if v not in MARKER_COLORS:
            raise ValueError(f'Marker color must be one of: {MARKER_COLORS}')
        return v


class ImportRequest(BaseModel):
    users: Dict[str, ImportedUser]
    mode: Literal["merge", "replace"] = "merge"


class ImportResult(BaseModel):
    success: bool = True
    count: int
