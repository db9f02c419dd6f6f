"""
Permission codes & matching.

A permission code is the string form of a `(resource, action)` pair:
`users:read`, `roles:*`, `*:*`.  Routes declare the codes they need;
`parse_permission_code` turns them back into pairs and `grants` decides
whether a stored permission covers a pair.

Matching is exact and case-sensitive.  `*` on either side of the
STORED permission widens the match; a `*` in the requested pair is just
a literal.
"""

from typing import Protocol

from app.core.errors import invalid_format

WILDCARD = "*"
SEPARATOR = ":"


class Grant(Protocol):
    resource: str
    action: str


def grants(permission: Grant, resource: str, action: str) -> bool:
    """True iff `permission` covers `(resource, action)`.  Never raises."""
    return (permission.resource == resource or permission.resource == WILDCARD) and (
        permission.action == action or permission.action == WILDCARD
    )


def parse_permission_code(code: str) -> tuple[str, str]:
    """Split `resource:action` into its two tokens.

    Anything other than exactly two non-empty tokens is a route
    configuration bug and raises `invalid_format`.  It is NOT a denial.
    """
    parts = code.split(SEPARATOR) if isinstance(code, str) else []
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise invalid_format(str(code))
    return parts[0], parts[1]


def format_permission_code(resource: str, action: str) -> str:
    return f"{resource}{SEPARATOR}{action}"
