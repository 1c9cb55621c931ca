from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from underground.core.database import get_db
from underground.core.errors import Forbidden
from underground.core.security import PasswordHasher, get_password_hasher
from underground.models.user import User
from underground.routers.auth import get_current_user
from underground.schemas.auth import SessionUser
from underground.schemas.user import MARKER_COLORS, PasswordChangeRequest, ProfileUpdate
from underground.services.user_service import UserService

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/users", response_model=list[SessionUser])
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await UserService(db).list_users()


@router.get("/marker-colors")
async def marker_colors():
    return MARKER_COLORS


@router.get("/user/{username}", response_model=SessionUser)
async def get_user(
    username: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await UserService(db).get(username)


@router.put("/user/{username}", response_model=SessionUser)
async def update_user(
    username: str,
    payload: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if current_user.username != username and not current_user.is_admin:
        raise Forbidden("Cannot edit another member's profile")
    return await UserService(db).update_profile(username, payload)


@router.put("/user/{username}/password")
async def change_password(
    username: str,
    payload: PasswordChangeRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    if current_user.username != username:
        raise Forbidden("Cannot change another member's password")
    await UserService(db).change_password(
        username, payload.current_password, payload.new_password, hasher
    )
    return {"success": True}
