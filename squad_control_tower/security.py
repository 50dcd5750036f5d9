"""Shared-token check for store endpoints."""

import secrets
from typing import Optional

from fastapi import Header, HTTPException

from .config import get_settings


def require_api_token(authorization: Optional[str] = Header(default=None)) -> None:
    """Require ``Authorization: Bearer <API_TOKEN>`` when a token is configured."""
    expected = get_settings().api_token
    if not expected:
        return

    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not secrets.compare_digest(token, expected):
        raise HTTPException(
            status_code=401,
            detail={"error": "UNAUTHORIZED", "message": "Invalid or missing token"},
            headers={"WWW-Authenticate": "Bearer"},
        )
