from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from underground.core.database import get_db
from underground.models.user import User
from underground.routers.auth import get_current_user
from underground.schemas.invite import InviteCreated, InviteInfo
from underground.services.invite_service import InviteService

router = APIRouter(prefix="/api", tags=["invites"])


@router.post("/invite", response_model=InviteCreated)
async def create_invite(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    invite = await InviteService(db).issue(current_user.username)
    return {"token": invite.token}


@router.get("/invites", response_model=list[InviteInfo])
async def list_my_invites(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await InviteService(db).list_issued_by(current_user.username)
