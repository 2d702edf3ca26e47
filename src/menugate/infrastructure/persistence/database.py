"""Database layer using SQLAlchemy 2.0 async.

Provides the declarative base, the engine/session manager and the FastAPI
session dependency. SQLite (aiosqlite) is the default driver.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import event, select, text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from menugate.core.config import get_settings
from menugate.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Database connection and session manager.

    Owns the async engine and session factory, both created lazily on first use.
    """

    def __init__(self) -> None:
        self.settings = get_settings()
        self._engine = None
        self._session_factory = None

    @property
    def engine(self):
        """Get or create the database engine.

        Returns:
            AsyncEngine: SQLAlchemy async engine instance.
        """
        if self._engine is None:
            is_sqlite = self.settings.database_url.startswith("sqlite")
            engine_kwargs = {"echo": self.settings.db_echo}
            if is_sqlite:
                engine_kwargs["connect_args"] = {"check_same_thread": False}
            else:
                engine_kwargs.update(
                    pool_size=self.settings.db_pool_size,
                    max_overflow=self.settings.db_max_overflow,
                    pool_timeout=self.settings.db_pool_timeout,
                    pool_recycle=self.settings.db_pool_recycle,
                )
            self._engine = create_async_engine(self.settings.database_url, **engine_kwargs)
            if is_sqlite:
                event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

            logger.info(
                "Database engine created",
                database_url=self._engine.url.render_as_string(hide_password=True),
            )
        return self._engine

    @property
    def session_factory(self):
        """Get or create the session factory.

        Returns:
            async_sessionmaker: SQLAlchemy async session factory.
        """
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
            logger.debug("Database session factory created")
        return self._session_factory

    async def create_tables(self) -> None:
        """Create all tables known to ``Base.metadata``."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created")

    async def drop_tables(self) -> None:
        """Drop all database tables.

        WARNING: This will delete all data. Only use in testing!
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            logger.warning("Database tables dropped")

    async def disconnect(self) -> None:
        """Close the database engine and all connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a session that rolls back if the block raises.

        Example:
            async with db.session() as session:
                result = await session.execute(select(MenuModel))
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def check_connection(self) -> bool:
        """Check if database connection is working."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
                logger.debug("Database connection check successful")
                return True
        except Exception as e:
            logger.error("Database connection check failed", error=str(e))
            return False


_db_manager: DatabaseManager | None = None


def get_db_manager() -> DatabaseManager:
    """Get the global database manager instance."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a database session."""
    db = get_db_manager()
    async with db.session() as session:
        yield session


async def init_database() -> None:
    """Initialize the database on startup.

    Creates tables and seeds the built-in named roles in development. In
    other environments the schema is expected to exist already.
    """
    # Models must be imported before create_tables() so they register on Base.metadata
    from menugate.infrastructure.persistence.models import (  # noqa: F401
        MenuModel,
        MenuRolePermissionModel,
        MenuUserPermissionModel,
        RoleModel,
        UserModel,
    )

    db = get_db_manager()
    settings = get_settings()

    if settings.database_url.startswith("sqlite") and ":memory:" not in settings.database_url:
        db_dir = Path(settings.database_url.split(":///")[-1]).parent
        db_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Database directory created", path=str(db_dir))

    if not await db.check_connection():
        logger.error("Database connection failed")
        raise RuntimeError("Failed to connect to database")

    if settings.is_development:
        logger.info("Development mode: Creating database tables")
        await db.create_tables()
        await _seed_default_roles(db)
    else:
        logger.info("Skipping auto-create outside development")


async def _seed_default_roles(db: DatabaseManager) -> None:
    """Seed the built-in named roles if they don't exist."""
    from menugate.infrastructure.persistence.models import RoleModel

    default_roles = [
        {
            "name": "audit",
            "level": "admin",
            "company_access": "all",
            "description": "Read-mostly oversight across every company",
        },
    ]

    async with db.session() as session:
        for role_data in default_roles:
            result = await session.execute(
                select(RoleModel).where(RoleModel.name == role_data["name"])
            )
            if result.scalar_one_or_none() is None:
                session.add(RoleModel(**role_data))
                logger.info("Seeded default role", role_name=role_data["name"])

        await session.commit()


async def close_database() -> None:
    """Close the database connection on shutdown."""
    db = get_db_manager()
    await db.disconnect()
