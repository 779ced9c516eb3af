"""
Authentication Module

Shared-secret bearer authentication plus the caller identity header.
User accounts and sessions are handled upstream; the service only sees an
opaque user id forwarded in ``X-User-Id``.
"""

import logging
from typing import Optional

from fastapi import Header, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import get_settings

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


async def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> Optional[HTTPAuthorizationCredentials]:
    """
    Verify shared secret token.

    Raises:
        HTTPException: 401 if token is missing or invalid, 500 if auth is
            required but no secret is configured
    """
    settings = get_settings()
    if not settings.auth_required:
        # Auth not required in development without secret
        return credentials

    if not settings.runner_api_secret:
        raise HTTPException(status_code=500, detail="Server authentication not configured")

    if credentials is None or credentials.credentials != settings.runner_api_secret:
        raise HTTPException(status_code=401, detail="Invalid authentication token")

    return credentials


async def get_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> str:
    """Caller identity forwarded by the upstream auth layer."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()
