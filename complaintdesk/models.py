"""Domain records handed out by the complaint store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple


@dataclass(frozen=True)
class User:
    """A registered complainant and the complaints they have filed."""

    id: str
    secret_code: str
    name: str
    email: str
    complaint_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Complaint:
    """A single rated complaint submitted by a user."""

    id: str
    title: str
    summary: str
    rating: int
    user_id: str
    date: datetime
    resolved: bool = False


__all__ = ["Complaint", "User"]
