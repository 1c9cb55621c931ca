from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from underground.core.errors import InvalidCredentials
from underground.core.security import PasswordHasher, create_access_token
from underground.models.user import User
from underground.schemas.auth import Session, SessionUser
from underground.utils.logger import get_logger

logger = get_logger("auth")


def build_session(user: User) -> Session:
    profile = SessionUser.model_validate(user)
    return Session(
        **profile.model_dump(),
        access_token=create_access_token(data={"sub": user.username}),
    )


class AuthService:
    def __init__(self, db: AsyncSession, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher

    async def get_user(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def authenticate(self, username: Optional[str], password: Optional[str]) -> User:
        """Return the user for valid credentials.

        Unknown usernames and wrong passwords raise the same InvalidCredentials.
        """
        username = (username or "").strip()
        user = await self.get_user(username) if username else None
        ok = await self.hasher.verify(password or "", user.hashed_password if user else None)
        if user is None or not ok:
            logger.warning(f"Login failed for: {username}")
            raise InvalidCredentials()
        logger.info(f"Login successful for: {username}")
        return user
