"""
Interactive bootstrap script — creates an ADMIN user.

Usage:
    python -m app.scripts.create_admin

The startup seed already creates one admin from INITIAL_ADMIN_* settings;
use this when you want a named account instead.
"""

import asyncio
import getpass
import uuid

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.core.config import settings
from app.core.security import get_password_hasher
from app.models.user import User
from app.repositories.role_repository import RoleRepository
from app.repositories.user_repository import UserRepository


async def create_admin() -> None:
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async with session_factory() as session:
        users = UserRepository(session)
        roles = RoleRepository(session)

        # ── Collect input ────────────────────────────────────────────
        print(f"\n{settings.APP_NAME} — Admin Setup\n")
        email = input("  Admin email: ").strip().lower()
        first_name = input("  First name:  ").strip()
        last_name = input("  Last name:   ").strip()
        password = getpass.getpass("  Password:    ")
        confirm = getpass.getpass("  Confirm:     ")

        if password != confirm:
            print("\nPasswords do not match.")
            await engine.dispose()
            return

        if not email or not first_name or not last_name or not password:
            print("\nAll fields are required.")
            await engine.dispose()
            return

        if await users.exists_by_email(email):
            print(f"\nUser with email '{email}' already exists.")
            await engine.dispose()
            return

        # ── Find ADMIN role (must be seeded first) ───────────────────
        admin_role = await roles.find_by_name("ADMIN")
        if admin_role is None:
            print("\nADMIN role not found. Run `python -m app.rbac.permission_seed`")
            print("or start the app once, then re-run this script.")
            await engine.dispose()
            return

        admin_user = await users.save(
            User(
                id=uuid.uuid4(),
                email=email,
                password_hash=get_password_hasher().hash(password),
                first_name=first_name,
                last_name=last_name,
                is_active=True,
                role_id=admin_role.id,
            )
        )
        await session.commit()

        print("\nAdmin user created.")
        print(f"    ID:    {admin_user.id}")
        print(f"    Email: {admin_user.email}")
        print("\n   You can now log in via POST /api/auth/login\n")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(create_admin())
