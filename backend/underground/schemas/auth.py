from pydantic import BaseModel, Field
from typing import Optional


class RegisterRequest(BaseModel):
    # Optional so missing fields reach the registration checks and fail as InvalidInput.
    username: Optional[str] = None
    password: Optional[str] = None
    invite_token: Optional[str] = Field(None, alias="inviteToken")

    class Config:
        populate_by_name = True


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class SessionUser(BaseModel):
    """Profile fields shared by the session payload and the member list."""
    username: str
    full_name: str = Field("", alias="fullName")
    location: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    marker_color: str = Field("red", alias="markerColor")
    profile_photo: Optional[str] = Field(None, alias="profilePhoto")
    is_admin: bool = Field(False, alias="isAdmin")

    class Config:
        from_attributes = True
        populate_by_name = True


class Session(SessionUser):
    access_token: str = Field(..., alias="accessToken")
    token_type: str = Field("bearer", alias="tokenType")
