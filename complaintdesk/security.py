"""Secret-code authentication for the complaint desk API."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

from .errors import ForbiddenError, NotFoundError, UnauthorizedError
from .models import Complaint, User
from .store import Store

logger = logging.getLogger("complaintdesk.security")

SECRET_HEADER = "X-Secret-Code"

_secret_header = APIKeyHeader(name=SECRET_HEADER, auto_error=False)


def get_store(request: Request) -> Store:
    return request.app.state.store


def read_secret(raw: Optional[str] = Depends(_secret_header)) -> Optional[str]:
    if raw is None:
        return None
    return raw.strip() or None


def require_secret(secret: Optional[str] = Depends(read_secret)) -> str:
    """Return the caller's secret code or reject the request with 401."""

    if secret is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Secret code required")
    return secret


def require_user(
    secret: str = Depends(require_secret),
    store: Store = Depends(get_store),
) -> User:
    try:
        return store.authenticate_by_secret(secret)
    except NotFoundError as exc:
        logger.warning("Rejected request with an unknown secret code")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid secret code") from exc


def require_admin(
    secret: str = Depends(require_secret),
    store: Store = Depends(get_store),
) -> str:
    if not store.is_admin(secret):
        logger.warning("Rejected admin request with a non-admin secret code")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return secret


def can_view(store: Store, secret: str, complaint: Complaint) -> bool:
    """Return ``True`` when ``secret`` belongs to the admin or the complaint owner."""

    if store.is_admin(secret):
        return True
    try:
        user = store.authenticate_by_secret(secret)
    except NotFoundError:
        return False
    return user.id == complaint.user_id


def authorize_view(store: Store, secret: Optional[str], complaint: Complaint) -> None:
    """Raise unless the caller may read ``complaint``."""

    if secret is None:
        raise UnauthorizedError("Secret code required")
    if not can_view(store, secret, complaint):
        raise ForbiddenError("Access denied")


__all__ = [
    "SECRET_HEADER",
    "authorize_view",
    "can_view",
    "get_store",
    "read_secret",
    "require_admin",
    "require_secret",
    "require_user",
]
