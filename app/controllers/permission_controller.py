"""Permission controller — read-only; permissions are seeded, never edited."""

import uuid

from fastapi import APIRouter, Depends, Query

from app.rbac.dependencies import get_permission_repository, require_permission
from app.repositories.permission_repository import PermissionRepository
from app.schemas import Page, PermissionOut
from app.services import permission_service

router = APIRouter(
    prefix="/api/permissions",
    tags=["Permissions"],
    dependencies=[Depends(require_permission("permissions:read"))],
)


@router.get("", response_model=Page[PermissionOut])
async def list_permissions(
    permissions: PermissionRepository = Depends(get_permission_repository),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    items, total = await permission_service.list_permissions(permissions, limit=limit, offset=offset)
    return Page[PermissionOut](
        items=[PermissionOut.model_validate(p) for p in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{permission_id}", response_model=PermissionOut)
async def get_permission(
    permission_id: uuid.UUID,
    permissions: PermissionRepository = Depends(get_permission_repository),
):
    permission = await permission_service.get_permission_by_id(permission_id, permissions)
    return PermissionOut.model_validate(permission)
