"""
Script to create an admin user or promote existing user to admin
"""
import asyncio
import sys
import os

# Add backend to path
sys.path.append(os.path.join(os.path.dirname(__file__), 'backend'))

from underground.core.database import SessionLocal, init_models
from underground.models.user import User
from underground.core.security import get_password_hash
from sqlalchemy import select


async def create_admin_user():
    """Create an admin user if it doesn't exist, or promote an existing user to admin"""

    username = input("Enter admin username (default: admin): ").strip() or "admin"
    password = input("Enter admin password (default: admin123): ").strip() or "admin123"

    await init_models()
    async with SessionLocal() as db:
        # Check if user exists
        result = await db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()

        if user:
            # Promote to admin
            user.is_admin = True
            await db.commit()
            print(f"✅ User {username} promoted to admin!")
        else:
            # Create new admin user
            admin_user = User(
                username=username,
                hashed_password=get_password_hash(password),
                full_name="",
                marker_color="red",
                is_admin=True
            )
            db.add(admin_user)
            await db.commit()
            print(f"✅ Admin user created: {username}")

    print(f"\nYou can now login with:")
    print(f"  Username: {username}")
    print(f"  Password: {password}")
    print(f"\nIssue invites with: python backend/underground/utils/invite_manager.py {username} [count]")


if __name__ == "__main__":
    asyncio.run(create_admin_user())
