from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from underground.core.database import get_db
from underground.core.errors import InvalidInput
from underground.models.user import User
from underground.routers.auth import get_current_admin_user
from underground.schemas.invite import InviteInfo
from underground.schemas.transfer import ImportRequest, ImportResult
from underground.schemas.user import AdminFlagUpdate, AdminUser
from underground.services.invite_service import InviteService
from underground.services.transfer_service import TransferService
from underground.services.user_service import UserService
from underground.utils.logger import get_logger

logger = get_logger("routers.admin")
router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/users", response_model=list[AdminUser])
async def list_users(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin_user)
):
    return await UserService(db).list_users()


@router.delete("/user/{username}")
async def delete_user(
    username: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin_user)
):
    if username == admin.username:
        raise InvalidInput("Admins cannot delete their own account")
    await UserService(db).delete(username)
    logger.info(f"{admin.username} deleted user {username}")
    return {"success": True}


@router.put("/user/{username}/admin", response_model=AdminUser)
async def set_admin_flag(
    username: str,
    payload: AdminFlagUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin_user)
):
    if username == admin.username and not payload.is_admin:
        raise InvalidInput("Admins cannot remove their own admin flag")
    return await UserService(db).set_admin(username, payload.is_admin)


@router.get("/invites", response_model=list[InviteInfo])
async def list_invites(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin_user)
):
    return await InviteService(db).list_all()


@router.delete("/invite/{token}")
async def revoke_invite(
    token: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin_user)
):
    await InviteService(db).revoke(token)
    logger.info(f"{admin.username} revoked invite {token[:6]}...")
    return {"success": True}


@router.get("/export")
async def export_data(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin_user)
):
    data = await TransferService(db).export_all()
    return JSONResponse(
        content=data,
        headers={"Content-Disposition": "attachment; filename=underground-export.json"},
    )


@router.post("/import", response_model=ImportResult)
async def import_data(
    payload: ImportRequest,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin_user)
):
    count = await TransferService(db).import_users(payload, acting_admin=admin.username)
    return ImportResult(count=count)
