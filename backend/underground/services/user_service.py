from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from underground.core.config import get_settings
from underground.core.database import atomic
from underground.core.errors import IncorrectPassword, InvalidInput, UserNotFound
from underground.core.security import PasswordHasher
from underground.models.user import User
from underground.schemas.user import ProfileUpdate
from underground.utils.logger import get_logger

logger = get_logger("users")
settings = get_settings()


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, username: str) -> User:
        result = await self.db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFound()
        return user

    async def list_users(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(User.username))
        return list(result.scalars().all())

    async def update_profile(self, username: str, update: ProfileUpdate) -> User:
        user = await self.get(username)
        changes = update.model_dump(exclude_unset=True)
        # Non-nullable columns ignore an explicit null.
        for field in ("full_name", "marker_color"):
            if changes.get(field, "") is None:
                del changes[field]

        async with atomic(self.db):
            if "coordinates" in changes:
                coords = changes.pop("coordinates")
                user.latitude = coords["lat"] if coords else None
                user.longitude = coords["lng"] if coords else None
            for field, value in changes.items():
                setattr(user, field, value)
        logger.info(f"Profile updated for {username}")
        return user

    async def change_password(
        self,
        username: str,
        current_password: str,
        new_password: str,
        hasher: PasswordHasher,
    ) -> None:
        user = await self.get(username)
        if not await hasher.verify(current_password, user.hashed_password):
            logger.warning(f"Password change failed: incorrect current password for user {username}")
            raise IncorrectPassword()
        if len(new_password) < settings.MIN_PASSWORD_LENGTH:
            raise InvalidInput(f"New password must be at least {settings.MIN_PASSWORD_LENGTH} characters")

        hashed = await hasher.hash(new_password)
        async with atomic(self.db):
            user.hashed_password = hashed
        logger.info(f"Password updated successfully for user {username}")

    async def delete(self, username: str) -> None:
        user = await self.get(username)
        async with atomic(self.db):
            await self.db.delete(user)
        logger.info(f"User deleted: {username}")

    async def set_admin(self, username: str, is_admin: bool) -> User:
        user = await self.get(username)
        async with atomic(self.db):
            user.is_admin = is_admin
        logger.info(f"Admin flag for {username} set to {is_admin}")
        return user
