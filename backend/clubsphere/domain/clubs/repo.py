"""asyncpg access for clubs and events."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional
from uuid import UUID, uuid4

import asyncpg

from clubsphere.domain.clubs.models import Club, ClubStatus, Event

_CLUB_UPDATABLE = ("name", "description", "category", "location", "fee")


class ClubsRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def get_club(self, club_id: UUID) -> Optional[Club]:
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow("SELECT * FROM clubs WHERE id = $1", club_id)
        return Club.from_record(record) if record else None

    async def create_club(
        self,
        *,
        name: str,
        description: str,
        category: str,
        location: str,
        fee: Decimal,
        manager_email: str,
    ) -> Club:
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow(
                """
                INSERT INTO clubs (id, name, description, category, location, fee, manager_email, status)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                RETURNING *
                """,
                uuid4(),
                name,
                description,
                category,
                location,
                fee,
                manager_email,
                ClubStatus.PENDING.value,
            )
        return Club.from_record(record)

    async def update_club(self, club_id: UUID, changes: Mapping[str, Any]) -> Optional[Club]:
        fields = [key for key in _CLUB_UPDATABLE if key in changes]
        if not fields:
            return await self.get_club(club_id)
        assignments = ", ".join(f"{name} = ${idx}" for idx, name in enumerate(fields, start=2))
        query = f"UPDATE clubs SET {assignments}, updated_at = NOW() WHERE id = $1 RETURNING *"
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow(query, club_id, *(changes[name] for name in fields))
        return Club.from_record(record) if record else None

    async def set_status(self, club_id: UUID, status: ClubStatus) -> Optional[Club]:
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow(
                "UPDATE clubs SET status = $2, updated_at = NOW() WHERE id = $1 RETURNING *",
                club_id,
                status.value,
            )
        return Club.from_record(record) if record else None

    async def get_event(self, event_id: UUID) -> Optional[Event]:
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow("SELECT * FROM events WHERE id = $1", event_id)
        return Event.from_record(record) if record else None

    async def create_event(
        self,
        *,
        club_id: UUID,
        title: str,
        description: str,
        event_date: datetime,
        location: str,
        is_paid: bool,
        fee: Decimal,
        max_attendees: Optional[int],
    ) -> Event:
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow(
                """
                INSERT INTO events (id, club_id, title, description, event_date, location, is_paid, fee, max_attendees)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
                RETURNING *
                """,
                uuid4(),
                club_id,
                title,
                description,
                event_date,
                location,
                is_paid,
                fee,
                max_attendees,
            )
        return Event.from_record(record)
