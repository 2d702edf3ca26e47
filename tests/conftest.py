"""Pytest configuration for all tests."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from menugate.core.logging import get_logger
from menugate.infrastructure.auth.jwt_service import jwt_service
from menugate.infrastructure.persistence.database import Base, _enable_sqlite_foreign_keys
from menugate.infrastructure.persistence.models import RoleModel, UserModel

logger = get_logger(__name__)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database with foreign keys enforced.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    # Seed the built-in named role
    async with async_session_maker() as session:
        session.add(RoleModel(name="audit", level="admin", company_access="all"))
        await session.commit()

    async with async_session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database dependency."""
    from menugate.infrastructure.api.app import app
    from menugate.infrastructure.persistence.database import get_db_session

    app.dependency_overrides[get_db_session] = lambda: db_session
    if hasattr(app.state, "menu_cache"):
        app.state.menu_cache.invalidate_all()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


# (user_id, company_id, role)
DIRECTORY = [
    ("root", None, "root"),
    ("admin1", 1, "admin"),
    ("user1", 1, "user"),
    ("admin2", 2, "admin"),
    ("user2", 2, "user"),
    ("auditor", 1, "audit"),
    ("guest1", 1, "none"),
]


@pytest_asyncio.fixture
async def users(db_session: AsyncSession) -> dict[str, UserModel]:
    """Seed the user directory shared by integration tests."""
    created = {}
    for user_id, company_id, role in DIRECTORY:
        user = UserModel(
            id=user_id,
            username=user_id.title(),
            company_id=company_id,
            role=role,
            is_active=True,
        )
        db_session.add(user)
        created[user_id] = user
    await db_session.commit()
    return created


@pytest.fixture
def token_for():
    """Return a function minting a bearer token for a directory user."""

    def _token_for(user_id: str, role: str | None = None, company_id: int | None = None) -> str:
        entry = next((e for e in DIRECTORY if e[0] == user_id), None)
        if entry is not None:
            company_id = entry[1] if company_id is None else company_id
            role = role or entry[2]
        return jwt_service.create_access_token(
            user_id=user_id,
            role=role or "user",
            company_id=company_id,
        )

    return _token_for


@pytest.fixture
def auth_headers(token_for):
    """Return a function building Authorization headers for a directory user."""

    def _auth_headers(user_id: str, **kwargs) -> dict[str, str]:
        return {"Authorization": f"Bearer {token_for(user_id, **kwargs)}"}

    return _auth_headers
