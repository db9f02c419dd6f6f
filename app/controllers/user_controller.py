"""
User controller — admin user management.

Every route uses `Depends(require_permission(...))` for enforcement.
Controllers are THIN — they delegate to services and return schemas.
"""

import uuid

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.security import PasswordHasher, get_password_hasher
from app.rbac.dependencies import get_role_repository, get_user_repository, require_permission
from app.repositories.role_repository import RoleRepository
from app.repositories.user_repository import UserRepository
from app.schemas import CreateUserRequest, Page, UpdateUserRequest, UserOut
from app.services import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get(
    "",
    response_model=Page[UserOut],
    dependencies=[Depends(require_permission("users:read"))],
)
async def list_users(
    users: UserRepository = Depends(get_user_repository),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    items, total = await user_service.list_users(users, limit=limit, offset=offset)
    return Page[UserOut](
        items=[UserOut.from_user(u) for u in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{user_id}",
    response_model=UserOut,
    dependencies=[Depends(require_permission("users:read"))],
)
async def get_user(
    user_id: uuid.UUID,
    users: UserRepository = Depends(get_user_repository),
):
    user = await user_service.get_user_by_id(user_id, users)
    return UserOut.from_user(user)


@router.post(
    "",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission("users:create"))],
)
async def create_user(
    body: CreateUserRequest,
    users: UserRepository = Depends(get_user_repository),
    roles: RoleRepository = Depends(get_role_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    user = await user_service.create_user(body, users, roles, hasher)
    return UserOut.from_user(user)


@router.patch(
    "/{user_id}",
    response_model=UserOut,
    dependencies=[Depends(require_permission("users:update"))],
)
async def update_user(
    user_id: uuid.UUID,
    body: UpdateUserRequest,
    users: UserRepository = Depends(get_user_repository),
    roles: RoleRepository = Depends(get_role_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    user = await user_service.update_user(user_id, body, users, roles, hasher)
    return UserOut.from_user(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission("users:delete"))],
)
async def delete_user(
    user_id: uuid.UUID,
    users: UserRepository = Depends(get_user_repository),
):
    """Soft delete: the account disappears from every lookup."""
    await user_service.delete_user(user_id, users)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
