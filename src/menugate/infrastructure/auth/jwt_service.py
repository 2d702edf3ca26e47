"""Bearer token service.

Tokens are issued by the identity provider in front of MenuGate; this
service decodes them into the claims the engine consumes (user, company,
role). ``create_access_token`` exists for that provider and for tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from menugate.core.config import get_settings


class JWTError(Exception):
    """Base exception for JWT-related errors."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid."""

    pass


class JWTService:
    """Creates and validates HS256 access tokens."""

    ALGORITHM = "HS256"
    ISSUER = "menugate"

    def __init__(self, secret_key: str | None = None) -> None:
        """Initialize the JWT service.

        Args:
            secret_key: Secret key for signing tokens. Defaults to the configured key.
        """
        self._secret_key = secret_key

    @property
    def secret_key(self) -> str:
        if self._secret_key:
            return self._secret_key
        return get_settings().secret_key

    def create_access_token(
        self,
        user_id: str,
        role: str,
        company_id: int | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create an access token.

        Args:
            user_id: The user's identifier.
            role: Canonical level or named role.
            company_id: Company the user belongs to.
            expires_delta: Custom expiration time. Defaults to config value.

        Returns:
            Encoded JWT access token.
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=get_settings().access_token_expire_minutes)

        now = datetime.now(timezone.utc)
        payload = {
            "iss": self.ISSUER,
            "sub": user_id,
            "iat": now,
            "exp": now + expires_delta,
            "user_id": user_id,
            "company_id": company_id,
            "role": role,
            "type": "access",
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.ALGORITHM)

    def decode_token(self, token: str) -> dict[str, Any]:
        """Decode and validate a JWT token.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid.
        """
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.ALGORITHM],
                issuer=self.ISSUER,
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Invalid token") from e

    def validate_access_token(self, token: str) -> dict[str, Any]:
        """Validate that a token is an access token and decode it.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or not an access token.
        """
        payload = self.decode_token(token)
        if payload.get("type") != "access":
            raise InvalidTokenError("Not an access token")
        return payload


jwt_service = JWTService()
