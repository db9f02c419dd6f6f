"""
Auth controller — registration, login & current user.

Register and login are PUBLIC (no permission dependency).
`/me` requires a valid bearer token but no particular permission.
"""

from fastapi import APIRouter, Depends, status

from app.core.security import PasswordHasher, TokenService, get_password_hasher, get_token_service
from app.rbac.dependencies import (
    get_current_identity,
    get_role_repository,
    get_user_repository,
)
from app.rbac.identity import AuthenticatedIdentity
from app.repositories.role_repository import RoleRepository
from app.repositories.user_repository import UserRepository
from app.schemas import LoginRequest, RegisterRequest, TokenResponse, UserOut
from app.services import auth_service, user_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    users: UserRepository = Depends(get_user_repository),
    roles: RoleRepository = Depends(get_role_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    """Create a new account.  New users get the baseline role."""
    user = await auth_service.register_user(body, users, roles, hasher)
    return UserOut.from_user(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    users: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
):
    """Authenticate with email + password → receive a bearer token."""
    access_token, user = await auth_service.login(body, users, hasher, tokens)
    return TokenResponse(access_token=access_token, user=UserOut.from_user(user))


@router.get("/me", response_model=UserOut)
async def me(
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    users: UserRepository = Depends(get_user_repository),
):
    user = await user_service.get_user_by_id(identity.user_id, users)
    return UserOut.from_user(user)
