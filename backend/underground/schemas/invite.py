from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class InviteCreated(BaseModel):
    token: str


class InviteInfo(BaseModel):
    token: str
    created_by: str = Field(..., alias="createdBy")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    used_by: Optional[str] = Field(None, alias="usedBy")
    used_at: Optional[datetime] = Field(None, alias="usedAt")
    revoked: bool = False
    revoked_at: Optional[datetime] = Field(None, alias="revokedAt")

    class Config:
        from_attributes = True
        populate_by_name = True
