"""FastAPI dependencies for identity and role gating.

The bearer token is the identity source: it names the user, company and
role. The role name is then mapped to a canonical level before any engine
code sees it.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from menugate.core.config import get_settings
from menugate.core.logging import get_logger
from menugate.domain.entities import Identity, RoleLevel
from menugate.domain.services import IdentityService, MenuAccessCache
from menugate.infrastructure.auth import (
    InvalidTokenError,
    TokenExpiredError,
    jwt_service,
)
from menugate.infrastructure.persistence.database import get_db_session

logger = get_logger(__name__)


@dataclass
class CurrentUser:
    """Claims of a valid access token."""

    user_id: str
    company_id: int | None
    role: str


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
) -> CurrentUser:
    """Extract and validate the current user from the Authorization header.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired.
    """
    if authorization is None:
        logger.info("Authentication failed: missing Authorization header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.info("Authentication failed: invalid Authorization header format")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = jwt_service.validate_access_token(parts[1])
        return CurrentUser(
            user_id=payload["user_id"],
            company_id=payload.get("company_id"),
            role=payload["role"],
        )
    except TokenExpiredError:
        logger.info("Authentication failed: token expired")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except InvalidTokenError as e:
        logger.info("Authentication failed: invalid token", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except KeyError as e:
        logger.warning("Authentication failed: missing claim in token", missing_claim=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing claim: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )


AuthenticatedUser = Annotated[CurrentUser, Depends(get_current_user)]


async def get_identity(
    current_user: AuthenticatedUser,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> Identity:
    """Map the token's role name to a canonical identity."""
    return await IdentityService(session).identity_for(
        current_user.user_id, current_user.role, current_user.company_id
    )


CurrentIdentity = Annotated[Identity, Depends(get_identity)]


async def require_root(identity: CurrentIdentity) -> Identity:
    """Ensure the caller may change menu structure.

    Raises:
        HTTPException: 403 unless the caller resolves to the root level.
    """
    if identity.role is not RoleLevel.ROOT:
        logger.info(
            "Structural change denied",
            user_id=identity.user_id,
            role=identity.role.value,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Root access required",
        )
    return identity


RootIdentity = Annotated[Identity, Depends(require_root)]


async def require_admin(identity: CurrentIdentity) -> Identity:
    """Ensure the caller is at least an administrator.

    Raises:
        HTTPException: 403 for user and none levels.
    """
    if identity.role.rank < RoleLevel.ADMIN.rank:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    return identity


AdminIdentity = Annotated[Identity, Depends(require_admin)]


def get_menu_cache(request: Request) -> MenuAccessCache:
    """Get the resolved-menu cache from app state, creating it on first use."""
    if not hasattr(request.app.state, "menu_cache"):
        request.app.state.menu_cache = MenuAccessCache(
            ttl_seconds=get_settings().menu_cache_ttl_seconds
        )
    return request.app.state.menu_cache
