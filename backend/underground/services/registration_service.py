"""Invite-gated registration.

Registration runs in two phases. Phase one validates the request against the
current ledger and hashes the password; hashing suspends the request, so the
token may be taken by someone else meanwhile. Phase two runs under the ledger
lock in a single transaction: the token is claimed with a conditional update
and the user row is inserted, or neither write survives.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from underground.core.database import atomic
from underground.core.errors import (
    InvalidInput,
    TokenAlreadyUsed,
    TokenNoLongerAvailable,
    TokenNotFound,
    TokenRevoked,
    UsernameTaken,
)
from underground.core.security import PasswordHasher
from underground.models.user import User
from underground.services.invite_service import InviteService, ledger_lock
from underground.utils.logger import get_logger

logger = get_logger("registration")


class RegistrationService:
    def __init__(self, db: AsyncSession, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher
        self.invites = InviteService(db)

    async def register(
        self,
        username: Optional[str],
        password: Optional[str],
        invite_token: Optional[str],
    ) -> User:
        username = (username or "").strip()
        if not username or not password:
            raise InvalidInput("Username and password required")
        if not invite_token:
            raise InvalidInput("Invite token required")

        await self._check_preconditions(username, invite_token)
        # End the read transaction before suspending on the hash; commit keeps
        # the caller's loaded objects unexpired.
        await self.db.commit()

        hashed_password = await self.hasher.hash(password)

        async with ledger_lock():
            try:
                async with atomic(self.db):
                    if not await self.invites.claim(invite_token, username):
                        logger.warning(f"Invite taken while registering {username}")
                        raise TokenNoLongerAvailable()
                    user = User(
                        username=username,
                        hashed_password=hashed_password,
                        full_name="",
                        location=None,
                        latitude=None,
                        longitude=None,
                        marker_color="red",
                        profile_photo=None,
                        is_admin=False,
                    )
                    self.db.add(user)
                    await self.db.flush()
            except IntegrityError:
                logger.warning(f"Username taken during commit: {username}")
                raise UsernameTaken()

        logger.info(f"User registered: {username}")
        return user

    async def _check_preconditions(self, username: str, invite_token: str) -> None:
        invite = await self.invites.get(invite_token)
        if invite is None:
            logger.warning(f"Unknown invite token used by {username}")
            raise TokenNotFound()
        if invite.used_by is not None:
            raise TokenAlreadyUsed()
        if invite.revoked:
            raise TokenRevoked()

        result = await self.db.execute(select(User.id).where(User.username == username))
        if result.scalar_one_or_none() is not None:
            raise UsernameTaken()
