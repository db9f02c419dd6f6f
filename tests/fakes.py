"""In-memory repositories and model builders.

The fakes honour the same contracts as the SQLAlchemy repositories:
soft-deleted users are invisible, `find_by_ids` silently skips unknown
ids, and a repository flagged `failing` raises `upstream_failure`.
"""

import uuid
from datetime import datetime, timezone

import app.models  # noqa: F401  registers every mapper
from app.core.errors import upstream_failure
from app.models.permission import Permission
from app.models.role import Role
from app.models.user import User

TEST_PASSWORD = "Str0ng!Passw0rd"


class FakeRepository:
    name = "repo"

    def __init__(self):
        self.rows: dict[uuid.UUID, object] = {}
        self.calls: list[tuple[str, object]] = []
        self.failing = False

    def _record(self, operation: str, arg: object = None) -> None:
        self.calls.append((operation, arg))
        if self.failing:
            raise upstream_failure(f"{self.name}.{operation}")

    def _visible(self) -> list:
        return list(self.rows.values())

    def add(self, row):
        self.rows[row.id] = row
        return row

    async def find_by_id(self, id):
        self._record("find_by_id", id)
        return next((r for r in self._visible() if r.id == id), None)

    async def find_all(self, limit: int = 20, offset: int = 0):
        self._record("find_all", (limit, offset))
        return self._visible()[offset : offset + limit]

    async def count(self) -> int:
        self._record("count")
        return len(self._visible())


class FakeUserRepository(FakeRepository):
    name = "users"

    def __init__(self):
        super().__init__()
        self.roles: "FakeRoleRepository | None" = None

    def _visible(self) -> list:
        return [u for u in self.rows.values() if u.deleted_at is None]

    async def find_by_email(self, email: str):
        self._record("find_by_email", email)
        return next((u for u in self._visible() if u.email == email.lower()), None)

    async def exists_by_email(self, email: str) -> bool:
        self._record("exists_by_email", email)
        return any(u.email == email.lower() for u in self._visible())

    async def save(self, user: User) -> User:
        self._record("save", user.id)
        user.email = user.email.lower()
        if self.roles is not None:
            user.role = self.roles.rows.get(user.role_id)
        return self.add(user)

    async def update(self, user: User) -> User:
        self._record("update", user.id)
        user.email = user.email.lower()
        return user

    async def delete(self, user: User) -> None:
        self._record("delete", user.id)
        user.mark_deleted()


class FakeRoleRepository(FakeRepository):
    name = "roles"

    def __init__(self, users: FakeUserRepository):
        super().__init__()
        self.users = users

    async def find_by_name(self, name: str):
        self._record("find_by_name", name)
        return next((r for r in self.rows.values() if r.name == name), None)

    async def exists_by_name(self, name: str) -> bool:
        return await self.find_by_name(name) is not None

    async def count_users(self, role_id) -> int:
        self._record("count_users", role_id)
        return sum(1 for u in self.users._visible() if u.role_id == role_id)

    async def save(self, role: Role) -> Role:
        self._record("save", role.id)
        return self.add(role)

    async def update(self, role: Role) -> Role:
        self._record("update", role.id)
        return role

    async def delete(self, role: Role) -> None:
        self._record("delete", role.id)
        del self.rows[role.id]


class FakePermissionRepository(FakeRepository):
    name = "permissions"

    async def find_by_ids(self, ids):
        self._record("find_by_ids", list(ids))
        return [self.rows[i] for i in ids if i in self.rows]


# ── Builders ─────────────────────────────────────────────────────────


def make_permission(resource: str, action: str) -> Permission:
    return Permission(
        id=uuid.uuid4(),
        resource=resource,
        action=action,
        description=f"{resource}:{action}",
    )


def make_role(name: str, permissions=(), is_system: bool = False) -> Role:
    role = Role(id=uuid.uuid4(), name=name, description=f"{name} role", is_system=is_system)
    role.permissions = list(permissions)
    return role


def make_user(
    role: Role,
    *,
    email: str | None = None,
    is_active: bool = True,
    deleted: bool = False,
    password_hash: str = "not-a-bcrypt-hash",
) -> User:
    user = User(
        id=uuid.uuid4(),
        email=email or f"{uuid.uuid4().hex[:8]}@example.com",
        password_hash=password_hash,
        first_name="Test",
        last_name="User",
        is_active=is_active,
        role_id=role.id,
        deleted_at=datetime.now(timezone.utc) if deleted else None,
    )
    user.role = role
    return user
