"""Thread-safe in-memory storage for users and their complaints."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, Dict, List

from .errors import DuplicateEmailError, InvalidInputError, NotFoundError
from .locks import ReadWriteLock
from .models import Complaint, User

logger = logging.getLogger("complaintdesk.store")

DEFAULT_ADMIN_SECRET = "admin123"
MIN_RATING = 1
MAX_RATING = 5

_ID_BYTES = 16
_SECRET_BYTES = 8


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_id() -> str:
    """Return a random 128-bit identifier rendered as hex."""

    return secrets.token_hex(_ID_BYTES)


def generate_secret_code() -> str:
    """Return a random 64-bit bearer secret rendered as hex."""

    return secrets.token_hex(_SECRET_BYTES)


@dataclass(frozen=True)
class _UserRecord:
    id: str
    secret_code: str
    name: str
    email: str


class Store:
    """Owns every user, complaint and the admin credential for one process.

    A single :class:`ReadWriteLock` guards all state. Lookups share the read
    side; registration, submission and resolution take the write side.
    Complaints live only in ``_complaints``; per-user listings are derived
    from the ``_user_complaints`` index kept under the same lock.
    """

    def __init__(
        self,
        *,
        admin_secret: str = DEFAULT_ADMIN_SECRET,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not admin_secret:
            raise ValueError("Admin secret must not be empty")
        self._admin_secret = admin_secret
        self._clock = clock
        self._lock = ReadWriteLock()
        self._users: Dict[str, _UserRecord] = {}
        self._complaints: Dict[str, Complaint] = {}
        self._user_ids_by_email: Dict[str, str] = {}
        self._user_ids_by_secret: Dict[str, str] = {}
        self._user_complaints: Dict[str, List[str]] = {}

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def create_user(self, name: str, email: str) -> User:
        """Register a user, issuing a fresh identifier and secret code."""

        with self._lock.write():
            if email in self._user_ids_by_email:
                raise DuplicateEmailError("email already registered")

            user_id = self._fresh_key(generate_id, self._users)
            secret_code = self._fresh_key(generate_secret_code, self._user_ids_by_secret)
            record = _UserRecord(id=user_id, secret_code=secret_code, name=name, email=email)

            self._users[user_id] = record
            self._user_ids_by_email[email] = user_id
            self._user_ids_by_secret[secret_code] = user_id
            self._user_complaints[user_id] = []
            user = self._to_user_locked(record)

        logger.debug("Registered user %s", user_id)
        return user

    def authenticate_by_secret(self, secret_code: str) -> User:
        with self._lock.read():
            user_id = self._user_ids_by_secret.get(secret_code)
            if user_id is None:
                raise NotFoundError("user not found")
            return self._to_user_locked(self._users[user_id])

    def get_user(self, user_id: str) -> User:
        with self._lock.read():
            record = self._users.get(user_id)
            if record is None:
                raise NotFoundError("user not found")
            return self._to_user_locked(record)

    def is_admin(self, secret_code: str) -> bool:
        """Return ``True`` when ``secret_code`` is exactly the admin secret."""

        if not secret_code:
            return False
        return secrets.compare_digest(
            secret_code.encode("utf-8"), self._admin_secret.encode("utf-8")
        )

    # ------------------------------------------------------------------
    # Complaints
    # ------------------------------------------------------------------
    def create_complaint(self, user_id: str, title: str, summary: str, rating: int) -> Complaint:
        """File a complaint for ``user_id`` and append it to their listing."""

        if not title.strip():
            raise InvalidInputError("Title is required")
        if isinstance(rating, bool) or not MIN_RATING <= rating <= MAX_RATING:
            raise InvalidInputError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")

        with self._lock.write():
            if user_id not in self._users:
                raise NotFoundError("user not found")

            complaint = Complaint(
                id=self._fresh_key(generate_id, self._complaints),
                title=title,
                summary=summary,
                rating=int(rating),
                user_id=user_id,
                date=self._clock(),
            )
            self._complaints[complaint.id] = complaint
            self._user_complaints[user_id].append(complaint.id)

        logger.debug("Stored complaint %s for user %s", complaint.id, user_id)
        return complaint

    def get_complaint(self, complaint_id: str) -> Complaint:
        with self._lock.read():
            complaint = self._complaints.get(complaint_id)
        if complaint is None:
            raise NotFoundError("complaint not found")
        return complaint

    def get_user_complaints(self, user_id: str) -> List[Complaint]:
        """Return the complaints filed by ``user_id`` in submission order."""

        with self._lock.read():
            complaint_ids = self._user_complaints.get(user_id)
            if complaint_ids is None:
                raise NotFoundError("user not found")
            return [self._complaints[complaint_id] for complaint_id in complaint_ids]

    def get_all_complaints(self) -> List[Complaint]:
        with self._lock.read():
            return list(self._complaints.values())

    def resolve_complaint(self, complaint_id: str) -> Complaint:
        """Mark a complaint as resolved. Resolving twice is not an error."""

        with self._lock.write():
            complaint = self._complaints.get(complaint_id)
            if complaint is None:
                raise NotFoundError("complaint not found")
            if not complaint.resolved:
                complaint = replace(complaint, resolved=True)
                self._complaints[complaint_id] = complaint
            return complaint

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def count_users(self) -> int:
        with self._lock.read():
            return len(self._users)

    def count_complaints(self) -> int:
        with self._lock.read():
            return len(self._complaints)

    def _to_user_locked(self, record: _UserRecord) -> User:
        return User(
            id=record.id,
            secret_code=record.secret_code,
            name=record.name,
            email=record.email,
            complaint_ids=tuple(self._user_complaints.get(record.id, ())),
        )

    @staticmethod
    def _fresh_key(factory: Callable[[], str], taken: Dict[str, object]) -> str:
        key = factory()
        while key in taken:
            key = factory()
        return key


__all__ = [
    "DEFAULT_ADMIN_SECRET",
    "MAX_RATING",
    "MIN_RATING",
    "Store",
    "generate_id",
    "generate_secret_code",
]
