"""
Permission, role & initial-admin seeding.

Run this once against a live database to populate the default
permissions, the system roles and a first ADMIN account.  It is
IDEMPOTENT — safe to re-run; system roles have their permission sets
re-synced to the lists below on every run.

System roles:
    • ADMIN — `*:*`, everything
    • USER  — `users:read` only (baseline for self-registration)
    • GUEST — nothing

Usage:
    python -m app.rbac.permission_seed
"""

import asyncio
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings
from app.core.security import get_password_hasher
from app.models.base import Base
from app.models.permission import Permission
from app.models.role import Role
from app.models.user import User
from app.rbac.permissions import format_permission_code, parse_permission_code

logger = logging.getLogger(__name__)

# ────────────────────────────────────────────────────────────────────
# 1.  CANONICAL PERMISSION LIST  (lowercase; matching is case-sensitive)
# ────────────────────────────────────────────────────────────────────
PERMISSIONS: list[dict[str, str]] = [
    # Users
    {"resource": "users", "action": "create", "description": "Create new users"},
    {"resource": "users", "action": "read", "description": "View user details"},
    {"resource": "users", "action": "update", "description": "Update user information"},
    {"resource": "users", "action": "delete", "description": "Delete users (soft delete)"},
    # Roles
    {"resource": "roles", "action": "create", "description": "Create custom roles"},
    {"resource": "roles", "action": "read", "description": "View role details"},
    {"resource": "roles", "action": "update", "description": "Update role information"},
    {"resource": "roles", "action": "delete", "description": "Delete custom roles"},
    # Permissions (read-only)
    {"resource": "permissions", "action": "read", "description": "View permission details"},
    # Wildcard
    {"resource": "*", "action": "*", "description": "Full system access (admin)"},
]

# ────────────────────────────────────────────────────────────────────
# 2.  SYSTEM ROLE → PERMISSION MAPPING
# ────────────────────────────────────────────────────────────────────
SYSTEM_ROLES: dict[str, dict] = {
    "ADMIN": {
        "description": "System administrator with full access",
        "permissions": ["*:*"],
    },
    "USER": {
        "description": "Authenticated user with basic permissions",
        "permissions": ["users:read"],
    },
    "GUEST": {
        "description": "Guest user with no permissions",
        "permissions": [],
    },
}


# ────────────────────────────────────────────────────────────────────
# 3.  SEED FUNCTIONS (idempotent)
# ────────────────────────────────────────────────────────────────────
async def seed_permissions(session: AsyncSession) -> dict[str, Permission]:
    existing = (await session.execute(select(Permission))).scalars().all()
    by_code: dict[str, Permission] = {p.code: p for p in existing}

    for pdata in PERMISSIONS:
        code = format_permission_code(pdata["resource"], pdata["action"])
        if code in by_code:
            by_code[code].description = pdata["description"]
            continue
        perm = Permission(id=uuid.uuid4(), **pdata)
        session.add(perm)
        by_code[code] = perm

    await session.flush()  # ensure IDs are available
    return by_code


async def seed_roles(session: AsyncSession, by_code: dict[str, Permission]) -> dict[str, Role]:
    existing = (await session.execute(select(Role))).scalars().all()
    by_name: dict[str, Role] = {r.name: r for r in existing}

    for role_name, definition in SYSTEM_ROLES.items():
        perms = []
        for code in definition["permissions"]:
            resource, action = parse_permission_code(code)
            perm = by_code.get(format_permission_code(resource, action))
            if perm is not None:
                perms.append(perm)

        role = by_name.get(role_name)
        if role is None:
            role = Role(id=uuid.uuid4(), name=role_name)
            session.add(role)
            by_name[role_name] = role
        role.description = definition["description"]
        role.is_system = True
        role.permissions = perms

    await session.flush()
    return by_name


async def seed_initial_admin(session: AsyncSession, admin_role: Role) -> User | None:
    """Create the first ADMIN account unless a live one already exists."""
    existing = (
        await session.execute(
            select(User).where(User.role_id == admin_role.id, User.deleted_at.is_(None)).limit(1)
        )
    ).scalar_one_or_none()
    if existing is not None:
        logger.info("ADMIN user already exists, skipping.")
        return None

    email = settings.INITIAL_ADMIN_EMAIL.lower()
    taken = (await session.execute(select(User).where(User.email == email))).scalar_one_or_none()
    if taken is not None:
        logger.warning("Email %s already in use, initial ADMIN not created.", email)
        return None

    admin = User(
        id=uuid.uuid4(),
        email=email,
        password_hash=get_password_hasher().hash(settings.INITIAL_ADMIN_PASSWORD),
        first_name=settings.INITIAL_ADMIN_FIRST_NAME,
        last_name=settings.INITIAL_ADMIN_LAST_NAME,
        is_active=True,
        role_id=admin_role.id,
    )
    session.add(admin)
    await session.flush()
    logger.warning("Initial ADMIN %s created — change its password in production!", email)
    return admin


async def seed(session: AsyncSession) -> None:
    """Create permissions, system roles & the first admin if missing."""
    by_code = await seed_permissions(session)
    roles = await seed_roles(session, by_code)
    await seed_initial_admin(session, roles["ADMIN"])
    await session.commit()
    logger.info("Seeded %d permissions and %d system roles.", len(by_code), len(SYSTEM_ROLES))


# ────────────────────────────────────────────────────────────────────
# 4.  CLI entrypoint:  python -m app.rbac.permission_seed
# ────────────────────────────────────────────────────────────────────
async def main() -> None:
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async_session = async_sessionmaker(engine, expire_on_commit=False)
    async with async_session() as session:
        await seed(session)
    await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    asyncio.run(main())
