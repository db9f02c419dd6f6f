"""Permission repository (read-only)."""

from collections.abc import Sequence
from uuid import UUID

from app.models.permission import Permission
from app.repositories.base import BaseRepository


class PermissionRepository(BaseRepository[Permission]):
    """Repository for permission lookups."""

    model = Permission

    async def find_by_ids(self, ids: Sequence[UUID]) -> list[Permission]:
        """Batch lookup.  Ids with no matching row are silently omitted."""
        if not ids:
            return []
        result = await self._execute(
            self._select().where(Permission.id.in_(list(ids))),
            "permissions.find_by_ids",
        )
        return list(result.scalars().all())
