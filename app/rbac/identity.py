"""Per-request authenticated identity."""

import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """
    A verified user for the lifetime of one request.

    Built by the authentication step, never persisted.  Only the id is
    authoritative; `email` is carried for log lines.
    """

    user_id: uuid.UUID
    email: str = ""
