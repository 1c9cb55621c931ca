import os

# Cheap hashes and a throwaway database for the whole test run
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_underground.db")

import asyncio

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from underground.core.database import get_db, init_models
from underground.core.security import PasswordHasher, create_access_token, get_password_hash, get_password_hasher
from underground.main import app
from underground.models.invite import InviteToken
from underground.models.user import User


class GatedHasher(PasswordHasher):
    """Holds every hash until ``parties`` callers are hashing at the same time."""

    def __init__(self, parties: int):
        super().__init__()
        self.parties = parties
        self.waiting = 0
        self.ready = asyncio.Event()

    async def hash(self, password: str) -> str:
        self.waiting += 1
        if self.waiting >= self.parties:
            self.ready.set()
        await asyncio.wait_for(self.ready.wait(), timeout=5)
        return await super().hash(password)


class HookedHasher(PasswordHasher):
    """Runs ``hook`` while the caller is suspended on its hash."""

    def __init__(self, hook):
        super().__init__()
        self.hook = hook

    async def hash(self, password: str) -> str:
        await self.hook()
        return await super().hash(password)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'underground.db'}",
        connect_args={"check_same_thread": False},
    )
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def hasher():
    return PasswordHasher()


@pytest_asyncio.fixture
async def client(session_factory, hasher):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def use_hasher(custom: PasswordHasher) -> None:
    app.dependency_overrides[get_password_hasher] = lambda: custom


async def make_user(db: AsyncSession, username: str, password: str = "secret123", is_admin: bool = False) -> User:
    user = User(
        username=username,
        hashed_password=get_password_hash(password),
        full_name="",
        marker_color="red",
        is_admin=is_admin,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_invite(db: AsyncSession, issuer: str, token: str = None, **state) -> InviteToken:
    invite = InviteToken(token=token or f"tok-{issuer}-{os.urandom(4).hex()}", created_by=issuer, revoked=False, **state)
    db.add(invite)
    await db.commit()
    await db.refresh(invite)
    return invite


async def fetch_invite(session_factory, token: str) -> InviteToken:
    async with session_factory() as session:
        result = await session.execute(select(InviteToken).where(InviteToken.token == token))
        return result.scalar_one()


async def fetch_usernames(session_factory) -> list[str]:
    async with session_factory() as session:
        result = await session.execute(select(User.username).order_by(User.username))
        return list(result.scalars().all())


def auth_headers(username: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(data={'sub': username})}"}
