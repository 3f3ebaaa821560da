import os
from typing import AsyncGenerator

# Settings are read on first import; pin the test environment before that
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "development"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from libs.auth.models import CallerIdentity, Role  # noqa: E402
from libs.auth.tokens import create_access_token  # noqa: E402
from libs.common.config import get_settings  # noqa: E402
from libs.db.base import Base  # noqa: E402
from libs.db.session import get_async_db  # noqa: E402
from services.gateway_service.app.main import app  # noqa: E402
from tests.factories import ProfileFactory, UserFactory  # noqa: E402

get_settings.cache_clear()


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh in-memory database per test.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a session configured like the application's.
    """
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient on the gateway app sharing the test session.
    """

    async def _override_db():
        yield db_session

    app.dependency_overrides[get_async_db] = _override_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Identities
# ---------------------------------------------------------------------------


async def create_member(db: AsyncSession, role: Role = Role.STUDENT, **profile):
    """Insert a user with a profile and return (user, profile, caller)."""
    user = UserFactory.create()
    db.add(user)
    await db.flush()
    prof = ProfileFactory.create(user_id=user.id, role=role, **profile)
    db.add(prof)
    await db.commit()
    caller = CallerIdentity(user_id=user.id, role=role, profile_id=prof.id)
    return user, prof, caller


def bearer(caller: CallerIdentity) -> dict:
    return {"Authorization": f"Bearer {create_access_token(caller.user_id)}"}


@pytest_asyncio.fixture
async def admin(db_session) -> CallerIdentity:
    _, _, caller = await create_member(db_session, Role.ADMIN)
    return caller


@pytest_asyncio.fixture
async def coach(db_session) -> CallerIdentity:
    _, _, caller = await create_member(db_session, Role.COACH)
    return caller


@pytest_asyncio.fixture
async def student(db_session) -> CallerIdentity:
    _, _, caller = await create_member(db_session, Role.STUDENT)
    return caller


@pytest.fixture
def auth_headers():
    """Build Authorization headers for a caller: ``auth_headers(admin)``."""
    return bearer
