from __future__ import annotations

"""
Permission model.

A permission is one immutable `(resource, action)` grant such as
`users:read`.  Either side may be the wildcard `*`; `*:*` grants
everything.  Permissions are seeded at deploy time and referenced by
roles through `role_permissions`, never checked by role name in
endpoint logic.
"""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from app.rbac.permissions import format_permission_code, grants


class Permission(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "permissions"

    resource: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    __table_args__ = (
        UniqueConstraint("resource", "action", name="uq_permissions_resource_action"),
    )

    @property
    def code(self) -> str:
        return format_permission_code(self.resource, self.action)

    def grants(self, resource: str, action: str) -> bool:
        return grants(self, resource, action)

    def __repr__(self) -> str:
        return f"<Permission {self.code}>"
