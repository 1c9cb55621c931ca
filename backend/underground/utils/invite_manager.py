import asyncio
import sys
import os

# Add the backend directory to sys.path to allow imports from underground
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from underground.core.database import SessionLocal
from underground.core.errors import UserNotFound
from underground.services.invite_service import InviteService


async def create_invites(issuer: str, count: int = 10):
    async with SessionLocal() as db:
        service = InviteService(db)
        print(f"Generating {count} invites for {issuer}...")
        created = []
        for _ in range(count):
            invite = await service.issue(issuer)
            created.append(invite.token)

        print(f"Successfully created {len(created)} invites:")
        for token in created:
            print(f"- {token}")
        return created

if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python invite_manager.py <issuer_username> [count]")
        sys.exit(1)
    issuer = sys.argv[1]
    count = 10
    if len(sys.argv) > 2:
        try:
            count = int(sys.argv[2])
        except ValueError:
            print("Usage: python invite_manager.py <issuer_username> [count]")
            sys.exit(1)

    try:
        asyncio.run(create_invites(issuer, count))
    except UserNotFound as e:
        print(f"❌ {e}")
        sys.exit(1)
