from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import asyncpg
import pytest

from clubsphere.domain.errors import AlreadyExists, PaymentRequired
from clubsphere.domain.lifecycle.models import MembershipStatus
from clubsphere.domain.lifecycle.repo import MembershipsRepository, RegistrationsRepository


class _FakeAcquire:
    def __init__(self, conn):
        self._conn = conn

    async def __aenter__(self):
        return self._conn

    async def __aexit__(self, exc_type, exc, tb):
        return False


class _FakePool:
    def __init__(self, conn):
        self._conn = conn

    def acquire(self):
        return _FakeAcquire(self._conn)


def _violation(constraint: str) -> asyncpg.UniqueViolationError:
    exc = asyncpg.UniqueViolationError("duplicate key value violates unique constraint")
    exc.constraint_name = constraint
    return exc


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "constraint, error, detail",
    [
        ("memberships_one_active_idx", AlreadyExists, "already_member"),
        ("memberships_payment_ref_idx", PaymentRequired, "payment_already_applied"),
    ],
)
async def test_membership_insert_maps_constraint(constraint, error, detail):
    conn = AsyncMock()
    conn.fetchrow.side_effect = _violation(constraint)
    repo = MembershipsRepository(_FakePool(conn))
    with pytest.raises(error) as excinfo:
        await repo.insert_active(user_email="a@x.com", club_id=uuid4(), payment_ref="pi_1")
    assert excinfo.value.detail == detail
    assert isinstance(excinfo.value.__cause__, asyncpg.UniqueViolationError)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "constraint, error, detail",
    [
        ("event_registrations_one_registered_idx", AlreadyExists, "already_registered"),
        ("event_registrations_payment_ref_idx", PaymentRequired, "payment_already_applied"),
    ],
)
async def test_registration_insert_maps_constraint(constraint, error, detail):
    conn = AsyncMock()
    conn.fetchrow.side_effect = _violation(constraint)
    repo = RegistrationsRepository(_FakePool(conn))
    with pytest.raises(error) as excinfo:
        await repo.insert_registered(user_email="a@x.com", event_id=uuid4(), club_id=uuid4(), payment_ref=None)
    assert excinfo.value.detail == detail


@pytest.mark.asyncio
async def test_other_storage_errors_are_not_mapped():
    conn = AsyncMock()
    conn.fetchrow.side_effect = asyncpg.ForeignKeyViolationError("club missing")
    repo = MembershipsRepository(_FakePool(conn))
    with pytest.raises(asyncpg.ForeignKeyViolationError):
        await repo.insert_active(user_email="a@x.com", club_id=uuid4(), payment_ref=None)


@pytest.mark.asyncio
async def test_insert_active_returns_membership():
    membership_id, club_id = uuid4(), uuid4()
    conn = AsyncMock()
    conn.fetchrow.return_value = {
        "id": membership_id,
        "user_email": "a@x.com",
        "club_id": club_id,
        "status": "active",
        "payment_ref": None,
        "joined_at": datetime.now(timezone.utc),
        "cancelled_at": None,
        "expired_at": None,
    }
    repo = MembershipsRepository(_FakePool(conn))
    membership = await repo.insert_active(user_email="a@x.com", club_id=club_id, payment_ref=None)
    assert membership.id == membership_id
    assert membership.status is MembershipStatus.ACTIVE
    query = conn.fetchrow.await_args.args[0]
    assert "INSERT INTO memberships" in query
