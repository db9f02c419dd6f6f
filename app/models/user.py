from __future__ import annotations

"""
User model.

Design decisions:
- Exactly one role per user (`role_id`, NOT NULL).  Deleting a role
  that still has users is refused (`ondelete="RESTRICT"`).
- Soft delete via `SoftDeleteMixin`.  Repositories exclude marked rows
  from EVERY read, so the rest of the code never checks the marker.
- `is_active` lets an admin lock an account without deleting it.
"""

import uuid

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from typing import TYPE_CHECKING

from app.models.base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from app.models.role import Role


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    role_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="RESTRICT"),
        index=True,
        nullable=False,
    )

    # ── Relationships ────────────────────────────────────────────────
    role: Mapped["Role"] = relationship(  # noqa: F821
        lazy="selectin",
    )

    def can_authenticate(self) -> bool:
        return not self.is_deleted and bool(self.is_active)

    def __repr__(self) -> str:
        return f"<User {self.email}>"
