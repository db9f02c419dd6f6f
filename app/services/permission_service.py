"""Permission service — read-only queries."""

import uuid

from app.core.errors import not_found
from app.models.permission import Permission
from app.repositories.permission_repository import PermissionRepository


async def get_permission_by_id(
    permission_id: uuid.UUID,
    permissions: PermissionRepository,
) -> Permission:
    permission = await permissions.find_by_id(permission_id)
    if permission is None:
        raise not_found("Permission", permission_id)
    return permission


async def list_permissions(
    permissions: PermissionRepository,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Permission], int]:
    items = await permissions.find_all(limit=limit, offset=offset)
    total = await permissions.count()
    return items, total
