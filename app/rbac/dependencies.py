"""
RBAC dependencies — the request pipeline.

`require_permission` is a *dependency factory*: call it with one or
more permission codes and it returns a FastAPI dependency that will:

1. Authenticate the bearer token (via `get_current_identity`).
   This always runs first; a failure here means no permission is
   ever looked at.
2. Check each required code IN DECLARATION ORDER.
3. Stop at the first code that is denied (403) or cannot be decided
   (500/503).  The handler never runs unless every code is granted.

Denials name only the requirement that failed, never the caller's
grants.

Usage in a route:
    @router.get("/users", dependencies=[Depends(require_permission("users:read"))])
    async def list_users(...): ...

Or inject the identity:
    @router.delete("/users/{id}")
    async def delete_user(identity = Depends(require_permission("users:delete"))): ...

Collaborators are built per request from the request's DB session by
the `get_*` providers below.  Tests swap them via
`app.dependency_overrides`.
"""

import logging

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.errors import denied
from app.core.security import TokenService, get_token_service
from app.rbac.authentication import Authenticator
from app.rbac.authorization import AuthorizationService
from app.rbac.identity import AuthenticatedIdentity
from app.rbac.permissions import parse_permission_code
from app.repositories.permission_repository import PermissionRepository
from app.repositories.role_repository import RoleRepository
from app.repositories.user_repository import UserRepository

logger = logging.getLogger("rbac")


# ── Repositories ─────────────────────────────────────────────────────


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_role_repository(db: AsyncSession = Depends(get_db)) -> RoleRepository:
    return RoleRepository(db)


def get_permission_repository(db: AsyncSession = Depends(get_db)) -> PermissionRepository:
    return PermissionRepository(db)


# ── Core services ────────────────────────────────────────────────────


def get_authenticator(
    token_service: TokenService = Depends(get_token_service),
    users: UserRepository = Depends(get_user_repository),
) -> Authenticator:
    return Authenticator(token_service, users)


def get_authorization_service(
    users: UserRepository = Depends(get_user_repository),
    roles: RoleRepository = Depends(get_role_repository),
    permissions: PermissionRepository = Depends(get_permission_repository),
) -> AuthorizationService:
    return AuthorizationService(users, roles, permissions)


# ── Pipeline ─────────────────────────────────────────────────────────


async def get_current_identity(
    request: Request,
    authorization: str | None = Header(default=None),
    authenticator: Authenticator = Depends(get_authenticator),
) -> AuthenticatedIdentity:
    """Dependency for routes that need authentication only."""
    identity = await authenticator.authenticate(authorization)
    request.state.identity = identity
    return identity


class require_permission:
    """
    Dependency factory.

    Can be used as:
        Depends(require_permission("users:read"))
        Depends(require_permission("users:read", "roles:read"))
    """

    def __init__(self, *permission_codes: str):
        # A list, not a set: evaluation order is part of the contract.
        self.required_codes = list(permission_codes)

    async def __call__(
        self,
        identity: AuthenticatedIdentity = Depends(get_current_identity),
        authorization: AuthorizationService = Depends(get_authorization_service),
    ) -> AuthenticatedIdentity:
        for code in self.required_codes:
            decision = await authorization.authorize(identity, code)
            if not decision.granted:
                resource, action = parse_permission_code(code)
                raise denied(resource, action)
        return identity
