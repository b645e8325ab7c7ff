from __future__ import annotations

import pytest

from complaintdesk.errors import ForbiddenError, UnauthorizedError
from complaintdesk.security import authorize_view, can_view
from complaintdesk.store import Store


@pytest.fixture()
def store() -> Store:
    return Store(admin_secret="admin-secret")


def test_owner_and_admin_may_view(store: Store) -> None:
    owner = store.create_user("Alice", "a@x.com")
    complaint = store.create_complaint(owner.id, "Late delivery", "", 2)

    assert can_view(store, owner.secret_code, complaint)
    assert can_view(store, "admin-secret", complaint)
    authorize_view(store, owner.secret_code, complaint)
    authorize_view(store, "admin-secret", complaint)


def test_other_callers_are_denied(store: Store) -> None:
    owner = store.create_user("Alice", "a@x.com")
    other = store.create_user("Bob", "b@x.com")
    complaint = store.create_complaint(owner.id, "Late delivery", "", 2)

    assert not can_view(store, other.secret_code, complaint)
    assert not can_view(store, "unknown", complaint)
    with pytest.raises(ForbiddenError):
        authorize_view(store, other.secret_code, complaint)
    with pytest.raises(UnauthorizedError):
        authorize_view(store, None, complaint)
