"""
Pydantic schemas for request / response serialization.

Kept in a single file for now — split per-domain when it grows.
Schemas are deliberately decoupled from SQLAlchemy models so the
API surface can evolve independently of the DB layer.
"""

import re
import uuid
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from app.models.user import User

T = TypeVar("T")

NAME_PATTERN = r"^[a-zA-Z\s'-]+$"
ROLE_NAME_PATTERN = r"^[A-Z][A-Z_]*$"
PASSWORD_SPECIALS = re.compile(r"""[!@#$%^&*(),.?":{}|<>_\-+=\[\]\\/'`~]""")
# bcrypt only looks at the first 72 bytes and newer releases refuse more.
MAX_PASSWORD_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


def _check_password_strength(value: str) -> str:
    if not re.search(r"[A-Z]", value):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", value):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", value):
        raise ValueError("Password must contain at least one number")
    if not PASSWORD_SPECIALS.search(value):
        raise ValueError("Password must contain at least one special character")
    return value


# ── Auth ─────────────────────────────────────────────────────────────
class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


# ── User ─────────────────────────────────────────────────────────────
class UserOut(BaseModel):
    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    is_active: bool
    role_id: uuid.UUID
    role: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            is_active=user.is_active,
            role_id=user.role_id,
            role=user.role.name if user.role is not None else None,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class CreateUserRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    first_name: str = Field(min_length=1, max_length=100, pattern=NAME_PATTERN)
    last_name: str = Field(min_length=1, max_length=100, pattern=NAME_PATTERN)
    role_id: uuid.UUID

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return _check_password_strength(_check_password_bytes(value))


class UpdateUserRequest(BaseModel):
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=8, max_length=72)
    first_name: str | None = Field(default=None, min_length=1, max_length=100, pattern=NAME_PATTERN)
    last_name: str | None = Field(default=None, min_length=1, max_length=100, pattern=NAME_PATTERN)
    role_id: uuid.UUID | None = None
    is_active: bool | None = None

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return _check_password_strength(_check_password_bytes(value))

    @model_validator(mode="after")
    def at_least_one_field(self) -> "UpdateUserRequest":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self


# ── Permission ───────────────────────────────────────────────────────
class PermissionOut(BaseModel):
    id: uuid.UUID
    resource: str
    action: str
    code: str
    description: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


# ── Role ─────────────────────────────────────────────────────────────
class RoleOut(BaseModel):
    id: uuid.UUID
    name: str
    description: str
    is_system: bool
    permissions: list[PermissionOut] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class CreateRoleRequest(BaseModel):
    name: str = Field(min_length=2, max_length=50, pattern=ROLE_NAME_PATTERN)
    description: str = Field(default="", max_length=255)
    permission_ids: list[uuid.UUID] = []


class UpdateRoleRequest(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=50, pattern=ROLE_NAME_PATTERN)
    description: str | None = Field(default=None, max_length=255)
    permission_ids: list[uuid.UUID] | None = None

    @model_validator(mode="after")
    def at_least_one_field(self) -> "UpdateRoleRequest":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self


# ── Generic ──────────────────────────────────────────────────────────
class Page(BaseModel, Generic[T]):
    items: list[T]
    total: int
    limit: int
    offset: int
