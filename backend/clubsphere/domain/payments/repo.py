"""asyncpg access for the payment ledger."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import asyncpg

from clubsphere.domain.payments.models import Payment, PaymentStatus, PaymentType


class PaymentsRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def insert_pending(
        self,
        *,
        user_email: str,
        type_: PaymentType,
        target_id: UUID,
        amount: Decimal,
        currency: str,
        processor_ref: str,
    ) -> Payment:
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow(
                """
                INSERT INTO payments (id, user_email, type, target_id, amount, currency, processor_ref, status)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                RETURNING *
                """,
                uuid4(),
                user_email,
                type_.value,
                target_id,
                amount,
                currency,
                processor_ref,
                PaymentStatus.PENDING.value,
            )
        return Payment.from_record(record)

    async def get_by_ref(self, processor_ref: str) -> Optional[Payment]:
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow("SELECT * FROM payments WHERE processor_ref = $1", processor_ref)
        return Payment.from_record(record) if record else None

    async def mark_completed(self, processor_ref: str) -> Optional[Payment]:
        """Move a pending payment to completed; returns None when nothing was pending."""
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow(
                """
                UPDATE payments SET status = 'completed', completed_at = NOW()
                WHERE processor_ref = $1 AND status = 'pending'
                RETURNING *
                """,
                processor_ref,
            )
        return Payment.from_record(record) if record else None

    async def mark_failed(self, processor_ref: str) -> Optional[Payment]:
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow(
                """
                UPDATE payments SET status = 'failed', failed_at = NOW()
                WHERE processor_ref = $1 AND status = 'pending'
                RETURNING *
                """,
                processor_ref,
            )
        return Payment.from_record(record) if record else None

    async def has_completed(self, user_email: str, type_: PaymentType, target_id: UUID) -> bool:
        async with self._pool.acquire() as conn:
            found = await conn.fetchval(
                """
                SELECT 1 FROM payments
                WHERE user_email = $1 AND type = $2 AND target_id = $3 AND status = 'completed'
                LIMIT 1
                """,
                user_email,
                type_.value,
                target_id,
            )
        return bool(found)

    async def list_for_user(self, user_email: str) -> list[Payment]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT * FROM payments WHERE user_email = $1 ORDER BY created_at DESC",
                user_email,
            )
        return [Payment.from_record(row) for row in rows]

    async def list_all(self, *, limit: int = 200) -> list[Payment]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch("SELECT * FROM payments ORDER BY created_at DESC LIMIT $1", limit)
        return [Payment.from_record(row) for row in rows]

    async def fail_stale_pending(self, cutoff: datetime) -> int:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                UPDATE payments SET status = 'failed', failed_at = NOW()
                WHERE status = 'pending' AND created_at < $1
                RETURNING id
                """,
                cutoff,
            )
        return len(rows)
