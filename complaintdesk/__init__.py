"""Core utilities for the complaint desk service."""

from __future__ import annotations

from typing import Any

from .errors import (
    ComplaintDeskError,
    DuplicateEmailError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from .models import Complaint, User
from .store import Store


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the complaint API application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "Complaint",
    "ComplaintDeskError",
    "DuplicateEmailError",
    "ForbiddenError",
    "InvalidInputError",
    "NotFoundError",
    "Store",
    "UnauthorizedError",
    "User",
    "create_app",
]
