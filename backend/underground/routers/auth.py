from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from underground.core.database import get_db
from underground.core.errors import Forbidden, NotAuthenticated
from underground.core.security import PasswordHasher, decode_access_token, get_password_hasher, oauth2_scheme
from underground.models.user import User
from underground.schemas.auth import LoginRequest, RegisterRequest, Session, SessionUser
from underground.services.auth_service import AuthService, build_session
from underground.services.registration_service import RegistrationService
from underground.utils.logger import get_logger

logger = get_logger("routers.auth")
router = APIRouter(prefix="/api", tags=["auth"])


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> User:
    if not token:
        raise NotAuthenticated()
    username = decode_access_token(token)
    if username is None:
        raise NotAuthenticated()
    user = await AuthService(db, hasher).get_user(username)
    if user is None:
        raise NotAuthenticated()
    return user


async def get_current_admin_user(current_user: User = Depends(get_current_user)) -> User:
    # Role comes from the stored user row only.
    if not current_user.is_admin:
        raise Forbidden()
    return current_user


@router.post("/register", response_model=Session, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    logger.info(f"Registration request for: {payload.username}")
    service = RegistrationService(db, hasher)
    user = await service.register(payload.username, payload.password, payload.invite_token)
    return build_session(user)


@router.post("/login", response_model=Session)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    user = await AuthService(db, hasher).authenticate(payload.username, payload.password)
    return build_session(user)


@router.get("/me", response_model=SessionUser)
async def read_users_me(current_user: User = Depends(get_current_user)):
    return current_user
