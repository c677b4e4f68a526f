"""Request context carrying the caller's identity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Request context containing the authenticated user identity.

    ``user_id`` is the opaque identity issued by the auth provider; it is used
    to enforce ownership on every mutating operation.
    """

    user_id: str
