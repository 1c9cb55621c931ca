from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from underground.core.database import get_db
from underground.models.user import User
from underground.routers.auth import get_current_user
from underground.schemas.event import Event as EventSchema, EventCreate, EventUpdate
from underground.services.event_service import EventService

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=list[EventSchema])
async def list_events(
    month: str = Query(..., description="YYYY-MM"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await EventService(db, current_user).list_month(month)


@router.post("", response_model=EventSchema, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await EventService(db, current_user).create(payload)


@router.put("/{event_id}", response_model=EventSchema)
async def update_event(
    event_id: int,
    payload: EventUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await EventService(db, current_user).update(event_id, payload)


@router.delete("/{event_id}")
async def delete_event(
    event_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await EventService(db, current_user).delete(event_id)
    return {"success": True}
