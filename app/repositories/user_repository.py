"""User repository.

Soft-deleted users (``deleted_at IS NOT NULL``) are invisible to every
read in this class.  Nothing above the repository layer should ever
filter on ``deleted_at`` itself.
"""

from sqlalchemy import func, select

from app.core.errors import conflict
from app.models.user import User
from app.repositories.base import BaseRepository


def _email_taken():
    return conflict("Email already registered", field="email")


class UserRepository(BaseRepository[User]):
    """Repository for user operations."""

    model = User

    def _select(self):
        return select(User).where(User.deleted_at.is_(None))

    async def find_by_email(self, email: str) -> User | None:
        result = await self._execute(
            self._select().where(User.email == email.lower()),
            "users.find_by_email",
        )
        return result.scalar_one_or_none()

    async def exists_by_email(self, email: str) -> bool:
        result = await self._execute(
            select(func.count()).select_from(
                self._select().where(User.email == email.lower()).subquery()
            ),
            "users.exists_by_email",
        )
        return result.scalar_one() > 0

    async def save(self, user: User) -> User:
        """Insert a new user.

        A soft-deleted account still owns its email at the database level,
        so the unique constraint can fire even after `exists_by_email`
        returned False.
        """
        user.email = user.email.lower()
        self.session.add(user)
        await self._flush("users.save", on_conflict=_email_taken())
        await self._refresh(user, ["role"], "users.save")
        return user

    async def update(self, user: User) -> User:
        user.email = user.email.lower()
        await self._flush("users.update", on_conflict=_email_taken())
        await self._refresh(user, ["role"], "users.update")
        return user

    async def delete(self, user: User) -> None:
        """Soft delete: set the marker, keep the row."""
        user.mark_deleted()
        await self._flush("users.delete")
