from pydantic import BaseModel, Field, field_validator
from datetime import datetime, date
from typing import Literal, Optional

Visibility = Literal["community", "personal"]


def check_event_date(v: str) -> str:
    try:
        parsed = date.fromisoformat(v)
    except ValueError:
        raise ValueError('event_date must be YYYY-MM-DD')
    if parsed.isoformat() != v:
        raise ValueError('event_date must be YYYY-MM-DD')
    return v


def check_event_time(v: Optional[str]) -> Optional[str]:
    if not v:
        return None
    try:
        datetime.strptime(v, "%H:%M")
    except ValueError:
        raise ValueError('event_time must be HH:MM')
    return v


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    event_date: str
    event_time: Optional[str] = None
    description: str = ""
    location: str = ""
    visibility: Visibility = "community"

    @field_validator('event_date')
    @classmethod
    def validate_date(cls, v: str) -> str:
        return check_event_date(v)

    @field_validator('event_time')
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        return check_event_time(v)


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    event_date: Optional[str] = None
    event_time: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    visibility: Optional[Visibility] = None

    @field_validator('event_date')
    @classmethod
    def validate_date(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else check_event_date(v)

    @field_validator('event_time')
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        return check_event_time(v)


class Event(BaseModel):
    id: int
    title: str
    event_date: str
    event_time: Optional[str] = None
    description: str = ""
    location: str = ""
    visibility: str
    created_by: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
