"""Minimal auth dependency.

Stub implementation standing in for the hosted auth provider: the bearer
token is the opaque user identity. Real token verification belongs to the
provider and is not performed here.
"""

import re
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from bondicar.config import get_settings
from bondicar.db.context import RequestContext

_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_.:-]{1,128}$")


async def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from authorization header.

    - "Bearer <user_id>" identifies the caller
    - No header falls back to the configured dev user

    Args:
        authorization: Authorization header (e.g., "Bearer <user_id>")

    Returns:
        RequestContext with user_id

    Raises:
        HTTPException: If authorization is invalid
    """
    if not authorization:
        return RequestContext(user_id=get_settings().default_user_id)

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:].strip()  # Strip "Bearer "

    if not _TOKEN_PATTERN.match(token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return RequestContext(user_id=token)


async def require_scheduler(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
) -> RequestContext:
    """Allow only the configured scheduler identity through.

    Raises:
        HTTPException: 403 for any other caller
    """
    if ctx.user_id != get_settings().scheduler_user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the scheduler may publish due instances",
        )
    return ctx
