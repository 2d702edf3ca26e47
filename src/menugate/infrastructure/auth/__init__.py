"""Identity source: bearer token decoding."""

from menugate.infrastructure.auth.jwt_service import (
    InvalidTokenError,
    JWTError,
    JWTService,
    TokenExpiredError,
    jwt_service,
)

__all__ = [
    "InvalidTokenError",
    "JWTError",
    "JWTService",
    "TokenExpiredError",
    "jwt_service",
]
