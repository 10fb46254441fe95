from __future__ import annotations

import secrets
from typing import Dict, Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .models import Owner
from .settings import get_settings

_security = HTTPBasic(auto_error=False)

OWNER_HEADER = "X-Owner-Id"


def _owner_from_header(value: Optional[str]) -> Owner:
    if value is None or not value.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    try:
        return Owner.from_hex(value)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{OWNER_HEADER} must be 64 hex characters",
        ) from e


def _owner_from_basic(creds: Optional[HTTPBasicCredentials], users: Dict[str, str]) -> Owner:
    if creds is None or creds.username is None or creds.password is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    if not users:
        # Misconfiguration: auth enabled but no users provided
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Server authentication not configured",
            headers={"WWW-Authenticate": "Basic"},
        )

    expected = users.get(creds.username)
    if expected is None or not secrets.compare_digest(
        creds.password.encode("utf-8"), expected.encode("utf-8")
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return Owner.from_principal(creds.username)


# PUBLIC_INTERFACE
async def get_current_owner(
    creds: Optional[HTTPBasicCredentials] = Depends(_security),
    x_owner_id: Optional[str] = Header(default=None, alias=OWNER_HEADER),
) -> Owner:
    """
    FastAPI dependency resolving the calling principal to an Owner.

    Behavior:
    - If settings.enable_basic_auth is False (default): the identity is read
      from the X-Owner-Id header (hex encoded 32-byte key). A missing header
      is a 401, a malformed one a 400.
    - If True: HTTP Basic credentials are checked against BASIC_AUTH_USERS and
      the owner is derived from the username. Missing or invalid credentials
      raise 401 with WWW-Authenticate: Basic.

    Usage:
        @router.post("/")
        def create(owner: Owner = Depends(get_current_owner)) ...
    """
    settings = get_settings()
    if settings.enable_basic_auth:
        return _owner_from_basic(creds, settings.basic_auth_users)
    return _owner_from_header(x_owner_id)
