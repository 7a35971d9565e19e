"""Shared FastAPI dependencies for API routes."""

from __future__ import annotations

from fastapi import Header, HTTPException, status

from certify.catalog.loader import IndicatorCatalog, get_catalog
from certify.db.session import get_db  # re-export

__all__ = ["get_db", "get_current_user_id", "get_indicator_catalog"]

# Set by the upstream authentication layer; authentication itself happens there.
USER_ID_HEADER = "X-User-Id"


def get_current_user_id(x_user_id: str | None = Header(None, alias=USER_ID_HEADER)) -> str:
    """Return the caller's user id or raise 401."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return x_user_id.strip()


def get_indicator_catalog() -> IndicatorCatalog:
    """Read-only indicator catalog shared by all requests."""
    return get_catalog()
