"""Pytest configuration and fixtures."""

from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.security import PasswordHasher, TokenService, get_password_hasher, get_token_service
from app.models.user import User
from app.rbac.authentication import Authenticator
from app.rbac.authorization import AuthorizationService
from app.rbac.dependencies import (
    get_permission_repository,
    get_role_repository,
    get_user_repository,
)
from tests.fakes import (
    TEST_PASSWORD,
    FakePermissionRepository,
    FakeRoleRepository,
    FakeUserRepository,
    make_permission,
    make_role,
    make_user,
)


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture(scope="session")
def password_hash(hasher) -> str:
    return hasher.hash(TEST_PASSWORD)


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(secret_key="test-secret", algorithm="HS256", expire_minutes=5)


@pytest.fixture
def world(password_hash):
    """Seeded repositories mirroring the default system roles.

    ADMIN → *:*,  USER → users:read,  GUEST → nothing.
    """
    users = FakeUserRepository()
    roles = FakeRoleRepository(users)
    permissions = FakePermissionRepository()
    users.roles = roles

    perms = {
        code: permissions.add(make_permission(*code.split(":")))
        for code in (
            "users:create",
            "users:read",
            "users:update",
            "users:delete",
            "roles:create",
            "roles:read",
            "roles:update",
            "roles:delete",
            "permissions:read",
            "*:*",
        )
    }

    admin_role = roles.add(make_role("ADMIN", [perms["*:*"]], is_system=True))
    user_role = roles.add(make_role("USER", [perms["users:read"]], is_system=True))
    guest_role = roles.add(make_role("GUEST", [], is_system=True))

    def add_user(role, **kwargs):
        kwargs.setdefault("password_hash", password_hash)
        return users.add(make_user(role, **kwargs))

    return SimpleNamespace(
        users=users,
        roles=roles,
        permissions=permissions,
        perms=perms,
        admin_role=admin_role,
        user_role=user_role,
        guest_role=guest_role,
        admin=add_user(admin_role, email="admin@example.com"),
        regular=add_user(user_role, email="regular@example.com"),
        guest=add_user(guest_role, email="guest@example.com"),
        inactive=add_user(admin_role, email="inactive@example.com", is_active=False),
        deleted=add_user(admin_role, email="deleted@example.com", deleted=True),
    )


@pytest.fixture
def authorization(world) -> AuthorizationService:
    return AuthorizationService(world.users, world.roles, world.permissions)


@pytest.fixture
def authenticator(world, token_service) -> Authenticator:
    return Authenticator(token_service, world.users)


@pytest.fixture
def bearer(token_service):
    """Build an Authorization header value for a user."""

    def _bearer(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {token_service.sign(user.id)}"}

    return _bearer


@pytest.fixture
def api(world, token_service, hasher):
    from app.main import app

    app.dependency_overrides[get_user_repository] = lambda: world.users
    app.dependency_overrides[get_role_repository] = lambda: world.roles
    app.dependency_overrides[get_permission_repository] = lambda: world.permissions
    app.dependency_overrides[get_token_service] = lambda: token_service
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(api):
    async with AsyncClient(transport=ASGITransport(app=api), base_url="http://test") as ac:
        yield ac
