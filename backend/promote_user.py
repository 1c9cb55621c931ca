import asyncio
import sys
import os
from sqlalchemy import select

# Add backend to path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from underground.core.database import SessionLocal
from underground.models.user import User


async def set_admin(username: str, is_admin: bool):
    async with SessionLocal() as db:
        result = await db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if user is None:
            print(f"❌ No user named {username}")
            return 1
        user.is_admin = is_admin
        await db.commit()
        print(f"✅ {username} is_admin = {is_admin}")
        return 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python promote_user.py <username> [--revoke]")
        sys.exit(1)
    sys.exit(asyncio.run(set_admin(sys.argv[1], "--revoke" not in sys.argv[2:])))
