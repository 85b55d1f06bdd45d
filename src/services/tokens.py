"""Signed session tokens carrying a minimal claim set."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from src.config import get_settings
from src.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Claims:
    """Identity snapshot embedded in a token at issuance time."""

    id: int
    name: str
    email: str

    def to_payload(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email}

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Claims":
        """Build claims from a decoded token payload.

        Raises KeyError/TypeError/ValueError when the payload is not a claim set.
        """
        name = payload["name"]
        email = payload["email"]
        if not isinstance(name, str) or not isinstance(email, str):
            raise TypeError("name and email must be strings")
        return cls(id=int(payload["id"]), name=name, email=email)


class TokenService:
    """Issue and verify JWTs; no server-side session state is kept."""

    def __init__(self, secret: str, algorithm: str = "HS256", expiration_minutes: int | None = None):
        self.secret = secret
        self.algorithm = algorithm
        self.expiration_minutes = expiration_minutes

    def issue(self, claims: Claims) -> str:
        """Sign a token for the given claims."""
        to_encode: dict[str, Any] = claims.to_payload()
        if self.expiration_minutes is not None:
            to_encode["exp"] = datetime.now(UTC) + timedelta(minutes=self.expiration_minutes)
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Claims:
        """Decode a token, raising UnauthorizedError unless it is fully valid."""
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
            return Claims.from_payload(payload)
        except (JWTError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Rejected token: {e}")
            raise UnauthorizedError("Invalid token") from e


def get_token_service() -> TokenService:
    """Get a token service configured from settings."""
    settings = get_settings()
    return TokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expiration_minutes=settings.jwt_expiration_minutes,
    )
