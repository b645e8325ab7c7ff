"""Error taxonomy shared by the store and the HTTP layer."""

from __future__ import annotations


class ComplaintDeskError(Exception):
    """Base class for every failure raised by the complaint store."""


class DuplicateEmailError(ComplaintDeskError):
    """Raised when a registration reuses an email that is already taken."""


class NotFoundError(ComplaintDeskError):
    """Raised when a user or complaint identifier does not resolve."""


class UnauthorizedError(ComplaintDeskError):
    """Raised when a secret code is missing or does not match any user."""


class ForbiddenError(ComplaintDeskError):
    """Raised when the caller is authenticated but lacks the needed privilege."""


class InvalidInputError(ComplaintDeskError):
    """Raised when a field fails a presence or range check."""


__all__ = [
    "ComplaintDeskError",
    "DuplicateEmailError",
    "ForbiddenError",
    "InvalidInputError",
    "NotFoundError",
    "UnauthorizedError",
]
