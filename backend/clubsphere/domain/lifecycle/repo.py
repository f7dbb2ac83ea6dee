"""asyncpg access for memberships and event registrations.

Uniqueness is enforced by partial unique indexes; a violation is mapped
onto the business error for the index that fired.
"""

from __future__ import annotations

from datetime import datetime
from typing import Mapping, Optional
from uuid import UUID, uuid4

import asyncpg

from clubsphere.domain.errors import AlreadyExists, DomainError, PaymentRequired
from clubsphere.domain.lifecycle.models import (
    EventRegistration,
    Membership,
    MembershipStatus,
    RegistrationStatus,
)

_CONSTRAINT_ERRORS: Mapping[str, tuple[type[DomainError], str]] = {
    "memberships_one_active_idx": (AlreadyExists, "already_member"),
    "memberships_payment_ref_idx": (PaymentRequired, "payment_already_applied"),
    "event_registrations_one_registered_idx": (AlreadyExists, "already_registered"),
    "event_registrations_payment_ref_idx": (PaymentRequired, "payment_already_applied"),
}


def _map_unique_violation(exc: asyncpg.UniqueViolationError) -> DomainError:
    error_cls, detail = _CONSTRAINT_ERRORS.get(getattr(exc, "constraint_name", None) or "", (AlreadyExists, "already_exists"))
    return error_cls(detail)


class MembershipsRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def get(self, membership_id: UUID) -> Optional[Membership]:
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow("SELECT * FROM memberships WHERE id = $1", membership_id)
        return Membership.from_record(record) if record else None

    async def find_active(self, user_email: str, club_id: UUID) -> Optional[Membership]:
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow(
                "SELECT * FROM memberships WHERE user_email = $1 AND club_id = $2 AND status = 'active'",
                user_email,
                club_id,
            )
        return Membership.from_record(record) if record else None

    async def insert_active(self, *, user_email: str, club_id: UUID, payment_ref: Optional[str]) -> Membership:
        async with self._pool.acquire() as conn:
            try:
                record = await conn.fetchrow(
                    """
                    INSERT INTO memberships (id, user_email, club_id, status, payment_ref)
                    VALUES ($1, $2, $3, $4, $5)
                    RETURNING *
                    """,
                    uuid4(),
                    user_email,
                    club_id,
                    MembershipStatus.ACTIVE.value,
                    payment_ref,
                )
            except asyncpg.UniqueViolationError as exc:  # type: ignore[attr-defined]
                raise _map_unique_violation(exc) from exc
        return Membership.from_record(record)

    async def mark_cancelled(self, membership_id: UUID) -> Optional[Membership]:
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow(
                """
                UPDATE memberships SET status = 'cancelled', cancelled_at = NOW()
                WHERE id = $1 AND status IN ('active', 'pendingPayment')
                RETURNING *
                """,
                membership_id,
            )
        return Membership.from_record(record) if record else None

    async def list_for_user(self, user_email: str) -> list[Membership]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT * FROM memberships WHERE user_email = $1 ORDER BY joined_at DESC",
                user_email,
            )
        return [Membership.from_record(row) for row in rows]

    async def active_count(self, club_id: UUID) -> int:
        async with self._pool.acquire() as conn:
            count = await conn.fetchval(
                "SELECT COUNT(*) FROM memberships WHERE club_id = $1 AND status = 'active'",
                club_id,
            )
        return int(count or 0)

    async def expire_pending(self, cutoff: datetime) -> int:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                UPDATE memberships SET status = 'expired', expired_at = NOW()
                WHERE status = 'pendingPayment' AND joined_at < $1
                RETURNING id
                """,
                cutoff,
            )
        return len(rows)


class RegistrationsRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def get(self, registration_id: UUID) -> Optional[EventRegistration]:
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow("SELECT * FROM event_registrations WHERE id = $1", registration_id)
        return EventRegistration.from_record(record) if record else None

    async def find_registered(self, user_email: str, event_id: UUID) -> Optional[EventRegistration]:
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow(
                """
                SELECT * FROM event_registrations
                WHERE user_email = $1 AND event_id = $2 AND status = 'registered'
                """,
                user_email,
                event_id,
            )
        return EventRegistration.from_record(record) if record else None

    async def insert_registered(
        self,
        *,
        user_email: str,
        event_id: UUID,
        club_id: UUID,
        payment_ref: Optional[str],
    ) -> EventRegistration:
        async with self._pool.acquire() as conn:
            try:
                record = await conn.fetchrow(
                    """
                    INSERT INTO event_registrations (id, user_email, event_id, club_id, status, payment_ref)
                    VALUES ($1, $2, $3, $4, $5, $6)
                    RETURNING *
                    """,
                    uuid4(),
                    user_email,
                    event_id,
                    club_id,
                    RegistrationStatus.REGISTERED.value,
                    payment_ref,
                )
            except asyncpg.UniqueViolationError as exc:  # type: ignore[attr-defined]
                raise _map_unique_violation(exc) from exc
        return EventRegistration.from_record(record)

    async def mark_cancelled(self, registration_id: UUID) -> Optional[EventRegistration]:
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow(
                """
                UPDATE event_registrations SET status = 'cancelled', cancelled_at = NOW()
                WHERE id = $1 AND status = 'registered'
                RETURNING *
                """,
                registration_id,
            )
        return EventRegistration.from_record(record) if record else None

    async def list_for_user(self, user_email: str) -> list[EventRegistration]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT * FROM event_registrations WHERE user_email = $1 ORDER BY registered_at DESC",
                user_email,
            )
        return [EventRegistration.from_record(row) for row in rows]

    async def registered_count(self, event_id: UUID) -> int:
        async with self._pool.acquire() as conn:
            count = await conn.fetchval(
                "SELECT COUNT(*) FROM event_registrations WHERE event_id = $1 AND status = 'registered'",
                event_id,
            )
        return int(count or 0)
