"""
Authorization decision — the User → Role → Permissions walk.

`AuthorizationService` answers "may this user do `action` on
`resource`?" with a `Decision`.  A denial is a normal result, not an
exception.  Exceptions are reserved for the cases where no decision
can be made:

- the user or their role vanished mid-request (`integrity_fault`),
- a required permission code is malformed (`invalid_format`),
- storage is down (`upstream_failure`, raised by the repositories).

Nothing is cached: every call re-reads the user, the role and the
role's permissions, so a revoked grant takes effect on the next request.
"""

import enum
import logging
import uuid
from collections.abc import Sequence
from typing import Protocol

from app.core.errors import integrity_fault
from app.models.permission import Permission
from app.models.role import Role
from app.models.user import User
from app.rbac.identity import AuthenticatedIdentity
from app.rbac.permissions import parse_permission_code

logger = logging.getLogger("rbac")


class Decision(str, enum.Enum):
    GRANTED = "granted"
    DENIED = "denied"

    @property
    def granted(self) -> bool:
        return self is Decision.GRANTED


# ── Collaborators ────────────────────────────────────────────────────


class UserLookup(Protocol):
    async def find_by_id(self, id: uuid.UUID) -> User | None: ...


class RoleLookup(Protocol):
    async def find_by_id(self, id: uuid.UUID) -> Role | None: ...


class PermissionLookup(Protocol):
    async def find_by_ids(self, ids: Sequence[uuid.UUID]) -> list[Permission]: ...


class AuthorizationService:
    def __init__(self, users: UserLookup, roles: RoleLookup, permissions: PermissionLookup):
        self.users = users
        self.roles = roles
        self.permissions = permissions

    async def check_permission(self, user_id: uuid.UUID, resource: str, action: str) -> Decision:
        """Decide a single `(resource, action)` for one user."""
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise integrity_fault("User", user_id)

        # Inactive accounts are denied before the role is even looked at.
        if not user.is_active:
            return Decision.DENIED

        role = await self.roles.find_by_id(user.role_id)
        if role is None:
            raise integrity_fault("Role", user.role_id)

        permission_ids = role.permission_ids()
        if not permission_ids:
            return Decision.DENIED

        permissions = await self.permissions.find_by_ids(permission_ids)
        if any(p.grants(resource, action) for p in permissions):
            return Decision.GRANTED
        return Decision.DENIED

    async def authorize(
        self,
        identity: AuthenticatedIdentity,
        requirements: str | Sequence[str],
    ) -> Decision:
        """
        Check one or many `resource:action` codes, in the order given.

        Stops at the first requirement that is denied or raises; that
        outcome is the overall result.  All must be granted for GRANTED.
        An empty requirement list is trivially granted.
        """
        codes = [requirements] if isinstance(requirements, str) else list(requirements)

        for code in codes:
            resource, action = parse_permission_code(code)
            decision = await self.check_permission(identity.user_id, resource, action)
            if not decision.granted:
                logger.warning(
                    "Permission denied for user %s, required: %s",
                    identity.user_id,
                    code,
                )
                return decision

        return Decision.GRANTED
