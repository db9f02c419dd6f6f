"""
Application error type.

Every failure the API can report is an `AppError` carrying a `kind`
discriminant plus kind-specific fields.  Services and the RBAC core
raise it; the exception handlers in `app.core.error_handlers` turn it
into an RFC 9457 problem+json response by looking up the kind, never
by inspecting the exception's class.

Use the small constructors below instead of building `AppError` by
hand so messages stay consistent across the codebase.
"""

import enum
from typing import Any


class ErrorKind(str, enum.Enum):
    # ── Access pipeline ──────────────────────────────────────────────
    UNAUTHENTICATED = "unauthenticated"
    DENIED = "denied"
    NOT_FOUND_INTEGRITY_FAULT = "not_found_integrity_fault"
    INVALID_FORMAT = "invalid_format"
    UPSTREAM_FAILURE = "upstream_failure"

    # ── Admin API ────────────────────────────────────────────────────
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"


class AppError(Exception):
    """Tagged error: `kind` says what went wrong, `fields` say about what."""

    def __init__(
        self,
        kind: ErrorKind,
        detail: str,
        *,
        reason: str | None = None,
        **fields: Any,
    ):
        super().__init__(detail)
        self.kind = kind
        self.detail = detail
        self.reason = reason
        self.fields = fields

    def __repr__(self) -> str:
        return f"<AppError {self.kind.value} reason={self.reason} detail={self.detail!r}>"


# ── Authentication reasons → client-facing messages ─────────────────
UNAUTHENTICATED_MESSAGES: dict[str, str] = {
    "missing": "Token missing",
    "malformed": "Invalid authorization header",
    "invalid-or-expired": "Invalid or expired token",
    "bad-payload": "Invalid token payload",
    "inactive-or-missing": "User inactive or not found",
    "invalid-credentials": "Invalid credentials",
}


def unauthenticated(reason: str) -> AppError:
    return AppError(
        ErrorKind.UNAUTHENTICATED,
        UNAUTHENTICATED_MESSAGES[reason],
        reason=reason,
    )


def denied(resource: str, action: str) -> AppError:
    # Only the requirement that failed is echoed, never the caller's grants.
    return AppError(
        ErrorKind.DENIED,
        "Missing required permission",
        resource=resource,
        action=action,
    )


def integrity_fault(entity: str, entity_id: Any) -> AppError:
    return AppError(
        ErrorKind.NOT_FOUND_INTEGRITY_FAULT,
        f"{entity} referenced during authorization no longer exists",
        entity=entity,
        entity_id=str(entity_id),
    )


def invalid_format(code: str) -> AppError:
    return AppError(
        ErrorKind.INVALID_FORMAT,
        "Invalid permission format",
        permission_code=code,
    )


def upstream_failure(operation: str) -> AppError:
    return AppError(
        ErrorKind.UPSTREAM_FAILURE,
        "A backing service is unavailable",
        operation=operation,
    )


def not_found(entity: str, entity_id: Any) -> AppError:
    return AppError(
        ErrorKind.NOT_FOUND,
        f"{entity} not found",
        entity=entity,
        entity_id=str(entity_id),
    )


def conflict(detail: str, **fields: Any) -> AppError:
    return AppError(ErrorKind.CONFLICT, detail, **fields)
