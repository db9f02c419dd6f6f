"""Role repository."""

from uuid import UUID

from sqlalchemy import func, select

from app.core.errors import conflict
from app.models.role import Role
from app.models.user import User
from app.repositories.base import BaseRepository


def _name_taken():
    return conflict("Role name already exists", field="name")


class RoleRepository(BaseRepository[Role]):
    """Repository for role operations."""

    model = Role

    async def find_by_name(self, name: str) -> Role | None:
        result = await self._execute(
            self._select().where(Role.name == name),
            "roles.find_by_name",
        )
        return result.scalar_one_or_none()

    async def exists_by_name(self, name: str) -> bool:
        return await self.find_by_name(name) is not None

    async def count_users(self, role_id: UUID) -> int:
        """Number of live (not soft-deleted) users holding the role."""
        result = await self._execute(
            select(func.count())
            .select_from(User)
            .where(User.role_id == role_id, User.deleted_at.is_(None)),
            "roles.count_users",
        )
        return result.scalar_one()

    async def save(self, role: Role) -> Role:
        self.session.add(role)
        await self._flush("roles.save", on_conflict=_name_taken())
        await self._refresh(role, ["permissions"], "roles.save")
        return role

    async def update(self, role: Role) -> Role:
        await self._flush("roles.update", on_conflict=_name_taken())
        await self._refresh(role, ["permissions"], "roles.update")
        return role

    async def delete(self, role: Role) -> None:
        await self.session.delete(role)
        # Soft-deleted users still hold the foreign key.
        await self._flush(
            "roles.delete",
            on_conflict=conflict("Role is still assigned to users", role_id=str(role.id)),
        )
