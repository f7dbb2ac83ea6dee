"""Data access for user records."""

from __future__ import annotations

from typing import Optional

import asyncpg

from clubsphere.domain.access.models import Role, User


class UsersRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def get(self, email: str) -> Optional[User]:
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow("SELECT * FROM users WHERE email = $1", email)
        return User.model_validate(dict(record)) if record else None

    async def create_if_absent(self, *, email: str, name: str, photo_url: Optional[str]) -> tuple[User, bool]:
        """Insert a member record unless one exists; returns (user, created)."""
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow(
                """
                INSERT INTO users (email, name, photo_url, role)
                VALUES ($1, $2, $3, $4)
                ON CONFLICT (email) DO NOTHING
                RETURNING *
                """,
                email,
                name,
                photo_url,
                Role.MEMBER.value,
            )
            if record is not None:
                return User.model_validate(dict(record)), True
            existing = await conn.fetchrow("SELECT * FROM users WHERE email = $1", email)
        return User.model_validate(dict(existing)), False

    async def set_role(self, email: str, role: Role) -> Optional[User]:
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow(
                "UPDATE users SET role = $2, updated_at = NOW() WHERE email = $1 RETURNING *",
                email,
                role.value,
            )
        return User.model_validate(dict(record)) if record else None

    async def list_all(self) -> list[User]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch("SELECT * FROM users ORDER BY created_at DESC")
        return [User.model_validate(dict(row)) for row in rows]
