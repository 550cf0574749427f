"""API dependencies - admin authorization"""

import secrets
from typing import Optional

from fastapi import Header

from contestjudge.config import settings
from contestjudge.core.exceptions import AuthorizationError


async def require_admin_token(
    x_admin_token: Optional[str] = Header(default=None, alias="X-Admin-Token")
) -> None:
    """
    Guard for admin routes

    User authentication lives outside this service; admin routes only
    check the shared ADMIN_TOKEN.

    Raises:
        AuthorizationError: If the header is missing or wrong
    """
    if not x_admin_token or not secrets.compare_digest(x_admin_token, settings.ADMIN_TOKEN):
        raise AuthorizationError("Admin access required")
