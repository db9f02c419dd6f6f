from __future__ import annotations

"""
Role model & association table.

Roles are named groups of permissions.  `role_permissions` is a plain
association table (no extra columns) whose composite primary key keeps
a role's permission set free of duplicates.

System roles (`ADMIN`, `USER`, `GUEST`) are flagged `is_system` and
cannot be deleted or renamed.
"""

import uuid

from sqlalchemy import Boolean, Column, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from typing import TYPE_CHECKING

from app.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from app.models.permission import Permission

# ── Association table ────────────────────────────────────────────────
role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column("role_id", ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("permission_id", ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    is_system: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    # ── Relationships ────────────────────────────────────────────────
    permissions: Mapped[list["Permission"]] = relationship(  # noqa: F821
        secondary=role_permissions,
        lazy="selectin",
    )

    def permission_ids(self) -> list[uuid.UUID]:
        """Ids of the permissions this role holds, duplicates collapsed."""
        return list(dict.fromkeys(p.id for p in self.permissions))

    def grants(self, resource: str, action: str) -> bool:
        return any(p.grants(resource, action) for p in self.permissions)

    def __repr__(self) -> str:
        return f"<Role {self.name}>"
