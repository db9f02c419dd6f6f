"""Role controller — list, inspect & manage roles."""

import uuid

from fastapi import APIRouter, Depends, Query, Response, status

from app.rbac.dependencies import get_permission_repository, get_role_repository, require_permission
from app.repositories.permission_repository import PermissionRepository
from app.repositories.role_repository import RoleRepository
from app.schemas import CreateRoleRequest, Page, RoleOut, UpdateRoleRequest
from app.services import role_service

router = APIRouter(prefix="/api/roles", tags=["Roles"])


@router.get(
    "",
    response_model=Page[RoleOut],
    dependencies=[Depends(require_permission("roles:read"))],
)
async def list_roles(
    roles: RoleRepository = Depends(get_role_repository),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    items, total = await role_service.list_roles(roles, limit=limit, offset=offset)
    return Page[RoleOut](
        items=[RoleOut.model_validate(r) for r in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{role_id}",
    response_model=RoleOut,
    dependencies=[Depends(require_permission("roles:read"))],
)
async def get_role(
    role_id: uuid.UUID,
    roles: RoleRepository = Depends(get_role_repository),
):
    role = await role_service.get_role_by_id(role_id, roles)
    return RoleOut.model_validate(role)


@router.post(
    "",
    response_model=RoleOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission("roles:create"))],
)
async def create_role(
    body: CreateRoleRequest,
    roles: RoleRepository = Depends(get_role_repository),
    permissions: PermissionRepository = Depends(get_permission_repository),
):
    role = await role_service.create_role(body, roles, permissions)
    return RoleOut.model_validate(role)


@router.patch(
    "/{role_id}",
    response_model=RoleOut,
    dependencies=[Depends(require_permission("roles:update"))],
)
async def update_role(
    role_id: uuid.UUID,
    body: UpdateRoleRequest,
    roles: RoleRepository = Depends(get_role_repository),
    permissions: PermissionRepository = Depends(get_permission_repository),
):
    role = await role_service.update_role(role_id, body, roles, permissions)
    return RoleOut.model_validate(role)


@router.delete(
    "/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission("roles:delete"))],
)
async def delete_role(
    role_id: uuid.UUID,
    roles: RoleRepository = Depends(get_role_repository),
):
    """System roles and roles still held by users are refused with 409."""
    await role_service.delete_role(role_id, roles)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
