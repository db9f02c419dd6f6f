"""
Authentication step — bearer header → AuthenticatedIdentity.

Checks run in a fixed order and the first failure stops the chain.
Each failure carries a machine-readable `reason`:

    missing              no Authorization header
    malformed            not exactly "Bearer <token>"
    invalid-or-expired   signature / expiry / structure rejected
    bad-payload          token subject is not a user id
    inactive-or-missing  user deleted, deactivated, or never existed

Fails closed: anything unexpected from the token library is reported
as `invalid-or-expired` and the library's message is only logged.
"""

import logging
import uuid
from typing import Protocol

from app.core.errors import unauthenticated
from app.core.security import TokenVerificationError
from app.models.user import User
from app.rbac.identity import AuthenticatedIdentity

logger = logging.getLogger("rbac")

BEARER_SCHEME = "Bearer"


class TokenVerifier(Protocol):
    def verify(self, token: str) -> str: ...


class ActiveUserLookup(Protocol):
    async def find_by_id(self, id: uuid.UUID) -> User | None: ...


class Authenticator:
    def __init__(self, token_service: TokenVerifier, users: ActiveUserLookup):
        self.token_service = token_service
        self.users = users

    @staticmethod
    def extract_token(authorization: str | None) -> str:
        if not authorization:
            raise unauthenticated("missing")

        parts = authorization.split(" ")
        if len(parts) != 2 or parts[0] != BEARER_SCHEME or not parts[1]:
            raise unauthenticated("malformed")
        return parts[1]

    async def authenticate(self, authorization: str | None) -> AuthenticatedIdentity:
        token = self.extract_token(authorization)

        try:
            subject = self.token_service.verify(token)
        except TokenVerificationError as exc:
            logger.info("Rejected bearer token: %s", exc)
            raise unauthenticated("invalid-or-expired") from None

        try:
            user_id = uuid.UUID(subject)
        except (TypeError, ValueError):
            raise unauthenticated("bad-payload") from None

        user = await self.users.find_by_id(user_id)
        if user is None or not user.can_authenticate():
            raise unauthenticated("inactive-or-missing")

        return AuthenticatedIdentity(user_id=user.id, email=user.email)
