"""
Authentication service.

Handles:
- Registration (new accounts get the configured baseline role)
- Login with email + password → bearer access token

All business logic lives here — controllers call service functions
and return the result.  Collaborators arrive as arguments so the
functions never reach for globals.
"""

import logging
import uuid

from app.core.config import settings
from app.core.errors import conflict, integrity_fault, unauthenticated
from app.core.security import PasswordHasher, TokenService
from app.models.user import User
from app.repositories.role_repository import RoleRepository
from app.repositories.user_repository import UserRepository
from app.schemas import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)


# ── Register ─────────────────────────────────────────────────────────

async def register_user(
    body: RegisterRequest,
    users: UserRepository,
    roles: RoleRepository,
    hasher: PasswordHasher,
    default_role_name: str | None = None,
) -> User:
    """Create an account with the baseline role.  409 if the email is taken."""
    if await users.exists_by_email(body.email):
        raise conflict("Email already registered", field="email")

    role_name = default_role_name or settings.DEFAULT_ROLE_NAME
    role = await roles.find_by_name(role_name)
    if role is None:
        # Seed data missing; not something the client can fix.
        raise integrity_fault("Role", role_name)

    user = User(
        id=uuid.uuid4(),
        email=body.email.lower(),
        password_hash=hasher.hash(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        is_active=True,
        role_id=role.id,
    )
    user = await users.save(user)
    logger.info("Registered user %s with role %s", user.id, role.name)
    return user


# ── Login ────────────────────────────────────────────────────────────

async def login(
    body: LoginRequest,
    users: UserRepository,
    hasher: PasswordHasher,
    tokens: TokenService,
) -> tuple[str, User]:
    """
    Validate credentials and issue an access token.

    Unknown email, wrong password and locked/deleted accounts all
    produce the same error, and an unknown email still pays for one
    bcrypt comparison, so neither the response nor its timing reveals
    which accounts exist.
    """
    user = await users.find_by_email(body.email)

    if user is None:
        hasher.compare(body.password, hasher.dummy_hash)
        logger.info("Failed login for %s", body.email)
        raise unauthenticated("invalid-credentials")

    if not hasher.compare(body.password, user.password_hash):
        logger.info("Failed login for %s", body.email)
        raise unauthenticated("invalid-credentials")

    if not user.can_authenticate():
        logger.info("Login refused for inactive user %s", user.id)
        raise unauthenticated("invalid-credentials")

    return tokens.sign(user.id), user
