import re
from typing import List

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from underground.core.database import atomic
from underground.core.errors import EventNotFound, Forbidden, InvalidInput
from underground.models.event import Event
from underground.models.user import User
from underground.schemas.event import EventCreate, EventUpdate
from underground.utils.logger import get_logger

logger = get_logger("events")

MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class EventService:
    def __init__(self, db: AsyncSession, user: User):
        self.db = db
        self.user = user

    async def list_month(self, month: str) -> List[Event]:
        """Community events plus the caller's personal events for ``YYYY-MM``."""
        if not MONTH_RE.match(month or ""):
            raise InvalidInput("month must be YYYY-MM")
        result = await self.db.execute(
            select(Event)
            .where(
                Event.event_date.startswith(f"{month}-"),
                or_(
                    Event.visibility == "community",
                    Event.created_by == self.user.username,
                ),
            )
            .order_by(Event.event_date, Event.event_time, Event.id)
        )
        return list(result.scalars().all())

    async def create(self, payload: EventCreate) -> Event:
        event = Event(**payload.model_dump(), created_by=self.user.username)
        async with atomic(self.db):
            self.db.add(event)
        await self.db.refresh(event)
        logger.info(f"Event {event.id} created by {self.user.username}")
        return event

    async def update(self, event_id: int, payload: EventUpdate) -> Event:
        event = await self._get(event_id)
        if event.created_by != self.user.username:
            raise Forbidden("Only the creator can edit this event")
        changes = payload.model_dump(exclude_unset=True)
        async with atomic(self.db):
            for field, value in changes.items():
                # event_time is the only field that may be cleared
                if value is None and field != "event_time":
                    continue
                setattr(event, field, value)
        await self.db.refresh(event)
        return event

    async def delete(self, event_id: int) -> None:
        event = await self._get(event_id)
        if event.created_by != self.user.username and not self.user.is_admin:
            raise Forbidden("Only the creator or an admin can delete this event")
        async with atomic(self.db):
            await self.db.delete(event)
        logger.info(f"Event {event_id} deleted by {self.user.username}")

    async def _get(self, event_id: int) -> Event:
        result = await self.db.execute(select(Event).where(Event.id == event_id))
        event = result.scalar_one_or_none()
        if event is None:
            raise EventNotFound()
        # Personal events of other members are invisible, not forbidden.
        if event.visibility == "personal" and event.created_by != self.user.username and not self.user.is_admin:
            raise EventNotFound()
        return event
