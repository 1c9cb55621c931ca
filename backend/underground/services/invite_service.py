import asyncio
import secrets
import weakref
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from underground.core.database import atomic
from underground.core.errors import CannotRevokeUsedToken, TokenNotFound, UserNotFound
from underground.models.invite import InviteToken
from underground.models.user import User
from underground.utils.logger import get_logger

logger = get_logger("invites")

TOKEN_BYTES = 24

_ledger_locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = weakref.WeakKeyDictionary()


def ledger_lock() -> asyncio.Lock:
    """Lock that serializes every read-modify-write on the invite ledger.

    One lock per event loop; asyncio locks cannot be shared across loops.
    """
    loop = asyncio.get_running_loop()
    lock = _ledger_locks.get(loop)
    if lock is None:
        lock = _ledger_locks[loop] = asyncio.Lock()
    return lock


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


class InviteService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, token: str) -> Optional[InviteToken]:
        result = await self.db.execute(select(InviteToken).where(InviteToken.token == token))
        return result.scalar_one_or_none()

    async def issue(self, issuer: str) -> InviteToken:
        result = await self.db.execute(select(User.id).where(User.username == issuer))
        if result.scalar_one_or_none() is None:
            raise UserNotFound(f"Issuer '{issuer}' does not exist")

        invite = InviteToken(token=generate_token(), created_by=issuer, revoked=False)
        async with atomic(self.db):
            self.db.add(invite)
        await self.db.refresh(invite)
        logger.info(f"Invite issued by {issuer}")
        return invite

    async def claim(self, token: str, username: str) -> bool:
        """Mark an available token as redeemed by ``username``.

        Single conditional UPDATE, so the availability check and the write
        cannot be separated. Does not commit; the caller owns the transaction.
        """
        result = await self.db.execute(
            update(InviteToken)
            .where(
                InviteToken.token == token,
                InviteToken.used_by.is_(None),
                InviteToken.revoked.is_(False),
            )
            .values(used_by=username, used_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def revoke(self, token: str) -> InviteToken:
        async with ledger_lock():
            async with atomic(self.db):
                result = await self.db.execute(
                    update(InviteToken)
                    .where(
                        InviteToken.token == token,
                        InviteToken.used_by.is_(None),
                        InviteToken.revoked.is_(False),
                    )
                    .values(revoked=True, revoked_at=datetime.now(timezone.utc))
                    .execution_options(synchronize_session=False)
                )
                changed = result.rowcount == 1
                if not changed:
                    # Nothing updated; the current state decides the outcome.
                    invite = await self.get(token)
                    if invite is None:
                        raise TokenNotFound(status_code=404)
                    if invite.used_by is not None:
                        raise CannotRevokeUsedToken()

        invite = await self.get(token)
        await self.db.refresh(invite)
        if changed:
            logger.info(f"Invite {token[:6]}... revoked")
        return invite

    async def list_issued_by(self, username: str) -> List[InviteToken]:
        result = await self.db.execute(
            select(InviteToken)
            .where(InviteToken.created_by == username)
            .order_by(InviteToken.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> List[InviteToken]:
        result = await self.db.execute(select(InviteToken).order_by(InviteToken.created_at.desc()))
        return list(result.scalars().all())
