from datetime import datetime, timezone

from sqlalchemy import select, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from underground.core.database import atomic
from underground.core.errors import InvalidInput, UsernameTaken
from underground.models.event import Event
from underground.models.invite import InviteToken
from underground.models.user import User
from underground.schemas.event import Event as EventSchema
from underground.schemas.invite import InviteInfo
from underground.schemas.transfer import ImportedUser, ImportRequest
from underground.schemas.user import AdminUser
from underground.utils.logger import get_logger

logger = get_logger("transfer")


class TransferService:
    """Bulk export and import of community data for admins."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def export_all(self) -> dict:
        users = (await self.db.execute(select(User).order_by(User.username))).scalars().all()
        invites = (await self.db.execute(select(InviteToken).order_by(InviteToken.created_at))).scalars().all()
        events = (await self.db.execute(select(Event).order_by(Event.event_date, Event.id))).scalars().all()

        exported_users = {}
        for user in users:
            record = AdminUser.model_validate(user).model_dump(mode="json", by_alias=True)
            record["passwordHash"] = user.hashed_password
            exported_users[user.username] = record

        logger.info(f"Exported {len(users)} users, {len(invites)} invites, {len(events)} events")
        return {
            "exportedAt": datetime.now(timezone.utc).isoformat(),
            "users": exported_users,
            "invites": [InviteInfo.model_validate(i).model_dump(mode="json", by_alias=True) for i in invites],
            "events": [EventSchema.model_validate(e).model_dump(mode="json") for e in events],
        }

    async def import_users(self, payload: ImportRequest, acting_admin: str) -> int:
        """Apply an import in one transaction and return the resulting user count.

        ``replace`` removes users missing from the import, except the acting admin.
        The acting admin's record may not clear their own admin flag.
        """
        users = {}
        for key, record in payload.users.items():
            username = key.strip()
            if not username:
                raise InvalidInput("Imported usernames must be non-empty")
            if username in users:
                raise InvalidInput(f"Duplicate username '{username}'")
            if record.username is not None and record.username.strip() != username:
                raise InvalidInput(f"Username mismatch for '{key}'")
            users[username] = record

        own = users.get(acting_admin)
        if own is not None and not own.is_admin:
            raise InvalidInput("Admins cannot remove their own admin flag")

        try:
            async with atomic(self.db):
                if payload.mode == "replace":
                    keep = set(users) | {acting_admin}
                    await self.db.execute(delete(User).where(User.username.not_in(keep)))

                existing = {
                    u.username: u
                    for u in (await self.db.execute(
                        select(User).where(User.username.in_(list(users)))
                    )).scalars().all()
                }
                for username, record in users.items():
                    user = existing.get(username)
                    if user is None:
                        user = User(username=username)
                        self.db.add(user)
                    self._apply(user, record)
                await self.db.flush()
                count = (await self.db.execute(select(func.count(User.id)))).scalar_one()
        except IntegrityError:
            raise UsernameTaken("Import conflicted with an existing username")

        logger.info(f"Imported {len(users)} users ({payload.mode}), {count} total")
        return count

    @staticmethod
    def _apply(user: User, record: ImportedUser) -> None:
        user.hashed_password = record.password_hash
        user.full_name = record.full_name
        user.location = record.location
        user.latitude = record.coordinates.lat if record.coordinates else None
        user.longitude = record.coordinates.lng if record.coordinates else None
        user.marker_color = record.marker_color
        user.profile_photo = record.profile_photo
        user.is_admin = record.is_admin
