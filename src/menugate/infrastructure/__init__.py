"""Infrastructure layer - external dependencies and implementations.

This layer contains:
- Database adapters (SQLAlchemy)
- API routes (FastAPI)
- Bearer token decoding (PyJWT)
"""

from menugate.infrastructure.persistence.database import (
    Base,
    DatabaseManager,
    close_database,
    get_db_manager,
    get_db_session,
    init_database,
)

__all__ = [
    "Base",
    "DatabaseManager",
    "get_db_manager",
    "get_db_session",
    "init_database",
    "close_database",
]
