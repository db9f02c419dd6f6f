"""
User service — admin CRUD & query helpers.

Soft-deleted users are already invisible through the repository, so
nothing here filters on `deleted_at`.
"""

import logging
import uuid

from app.core.errors import conflict, not_found
from app.core.security import PasswordHasher
from app.models.user import User
from app.repositories.role_repository import RoleRepository
from app.repositories.user_repository import UserRepository
from app.schemas import CreateUserRequest, UpdateUserRequest

logger = logging.getLogger(__name__)


async def get_user_by_id(user_id: uuid.UUID, users: UserRepository) -> User:
    user = await users.find_by_id(user_id)
    if user is None:
        raise not_found("User", user_id)
    return user


async def list_users(
    users: UserRepository,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[User], int]:
    items = await users.find_all(limit=limit, offset=offset)
    total = await users.count()
    return items, total


async def create_user(
    body: CreateUserRequest,
    users: UserRepository,
    roles: RoleRepository,
    hasher: PasswordHasher,
) -> User:
    """Admin action — create a user with an explicit role."""
    if await users.exists_by_email(body.email):
        raise conflict("Email already registered", field="email")

    role = await roles.find_by_id(body.role_id)
    if role is None:
        raise not_found("Role", body.role_id)

    user = User(
        id=uuid.uuid4(),
        email=body.email.lower(),
        password_hash=hasher.hash(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        is_active=True,
        role_id=role.id,
    )
    return await users.save(user)


async def update_user(
    user_id: uuid.UUID,
    body: UpdateUserRequest,
    users: UserRepository,
    roles: RoleRepository,
    hasher: PasswordHasher,
) -> User:
    """Admin action — partial update.  Only fields sent by the client change."""
    user = await get_user_by_id(user_id, users)
    changes = body.model_dump(exclude_unset=True)

    if changes.get("email") is not None and changes["email"].lower() != user.email:
        if await users.exists_by_email(changes["email"]):
            raise conflict("Email already registered", field="email")
        user.email = changes["email"].lower()

    if changes.get("role_id") is not None and changes["role_id"] != user.role_id:
        role = await roles.find_by_id(changes["role_id"])
        if role is None:
            raise not_found("Role", changes["role_id"])
        user.role_id = role.id
        user.role = role

    if changes.get("password") is not None:
        user.password_hash = hasher.hash(changes["password"])

    for field in ("first_name", "last_name", "is_active"):
        if changes.get(field) is not None:
            setattr(user, field, changes[field])

    return await users.update(user)


async def delete_user(user_id: uuid.UUID, users: UserRepository) -> None:
    """Admin action — soft delete.  The user can no longer authenticate."""
    user = await get_user_by_id(user_id, users)
    await users.delete(user)
    logger.info("Soft-deleted user %s", user_id)
