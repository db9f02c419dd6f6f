"""
Role service — custom role management.

Rules:
- Role names are unique.
- System roles (`is_system`) can be neither deleted nor renamed.
- A role that still has users cannot be deleted.
- Every permission id given must exist; duplicates are collapsed.
"""

import logging
import uuid
from collections.abc import Sequence

from app.core.errors import conflict, not_found
from app.models.permission import Permission
from app.models.role import Role
from app.repositories.permission_repository import PermissionRepository
from app.repositories.role_repository import RoleRepository
from app.schemas import CreateRoleRequest, UpdateRoleRequest

logger = logging.getLogger(__name__)


async def _resolve_permissions(
    ids: Sequence[uuid.UUID],
    permissions: PermissionRepository,
) -> list[Permission]:
    unique_ids = list(dict.fromkeys(ids))
    found = await permissions.find_by_ids(unique_ids)
    by_id = {p.id: p for p in found}
    for pid in unique_ids:
        if pid not in by_id:
            raise not_found("Permission", pid)
    return [by_id[pid] for pid in unique_ids]


async def get_role_by_id(role_id: uuid.UUID, roles: RoleRepository) -> Role:
    role = await roles.find_by_id(role_id)
    if role is None:
        raise not_found("Role", role_id)
    return role


async def list_roles(
    roles: RoleRepository,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Role], int]:
    items = await roles.find_all(limit=limit, offset=offset)
    total = await roles.count()
    return items, total


async def create_role(
    body: CreateRoleRequest,
    roles: RoleRepository,
    permissions: PermissionRepository,
) -> Role:
    if await roles.exists_by_name(body.name):
        raise conflict("Role name already exists", field="name")

    role = Role(
        id=uuid.uuid4(),
        name=body.name,
        description=body.description,
        is_system=False,
    )
    role.permissions = await _resolve_permissions(body.permission_ids, permissions)
    role = await roles.save(role)
    logger.info("Created role %s with %d permissions", role.name, len(role.permissions))
    return role


async def update_role(
    role_id: uuid.UUID,
    body: UpdateRoleRequest,
    roles: RoleRepository,
    permissions: PermissionRepository,
) -> Role:
    role = await get_role_by_id(role_id, roles)
    changes = body.model_dump(exclude_unset=True)

    new_name = changes.get("name")
    if new_name is not None and new_name != role.name:
        if role.is_system:
            raise conflict("Cannot rename system role", role=role.name)
        if await roles.exists_by_name(new_name):
            raise conflict("Role name already exists", field="name")
        role.name = new_name

    if changes.get("description") is not None:
        role.description = changes["description"]

    if changes.get("permission_ids") is not None:
        role.permissions = await _resolve_permissions(changes["permission_ids"], permissions)

    return await roles.update(role)


async def delete_role(role_id: uuid.UUID, roles: RoleRepository) -> None:
    role = await get_role_by_id(role_id, roles)

    if role.is_system:
        raise conflict("Cannot delete system role", role=role.name)

    if await roles.count_users(role.id) > 0:
        raise conflict("Role is still assigned to users", role=role.name)

    await roles.delete(role)
    logger.info("Deleted role %s", role.name)
