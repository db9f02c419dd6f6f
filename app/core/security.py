"""
Password hashing & JWT helpers.

- Passwords are hashed with bcrypt directly (passlib is unmaintained
  and broken with bcrypt>=4.1).
- Access tokens carry only the user id in `sub`; everything else
  (role, active flag) is re-read from the database on every request.
- Both services are plain objects built from settings so callers can
  receive them as constructor arguments.
"""

import uuid
from datetime import datetime, timedelta, timezone
from functools import cached_property, lru_cache
from typing import Any

import bcrypt
from jose import JWTError, jwt

from app.core.config import settings


class TokenVerificationError(Exception):
    """Raised when a token cannot be trusted (expired, tampered, garbled)."""


# ── Password hashing ────────────────────────────────────────────────


class PasswordHasher:
    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, plain: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")

    def compare(self, plain: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # Not a bcrypt hash at all
            return False

    @cached_property
    def dummy_hash(self) -> str:
        """A hash no password matches, compared against when the account is unknown."""
        return self.hash(uuid.uuid4().hex)


# ── JWT ──────────────────────────────────────────────────────────────


class TokenService:
    """Signs a user id into a bearer token and verifies it back."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def sign(self, user_id: uuid.UUID | str, expires_delta: timedelta | None = None) -> str:
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))
        to_encode: dict[str, Any] = {
            "sub": str(user_id),
            "iat": now,
            "exp": expire,
            "type": "access",
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Return the token subject.  Raises TokenVerificationError on failure."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as exc:
            raise TokenVerificationError(str(exc)) from exc

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise TokenVerificationError("token has no subject")
        return subject


@lru_cache(maxsize=1)
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=settings.BCRYPT_ROUNDS)


def get_token_service() -> TokenService:
    return TokenService(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )
