"""AsyncPG pool management for the backend.

The pool is created once in the application lifespan and handed to the
repositories that need it; nothing in the codebase reads a module-level pool.
"""

from __future__ import annotations

import asyncpg

from clubsphere.obs.logging import get_logger
from clubsphere.settings import settings

logger = get_logger("clubsphere.postgres")


async def init_pool(dsn: str | None = None) -> asyncpg.Pool:
	dsn = dsn or settings.postgres_url
	pool = await asyncpg.create_pool(
		dsn=dsn,
		min_size=settings.postgres_min_pool_size,
		max_size=settings.postgres_max_pool_size,
	)
	logger.info(
		"postgres_pool_ready",
		extra={"min_size": settings.postgres_min_pool_size, "max_size": settings.postgres_max_pool_size},
	)
	return pool


async def close_pool(pool: asyncpg.Pool | None) -> None:
	if pool is None:
		return
	await pool.close()
	logger.info("postgres_pool_closed")


async def ping_pool(pool: asyncpg.Pool) -> bool:
	try:
		async with pool.acquire() as conn:
			await conn.fetchval("SELECT 1")
	except (asyncpg.PostgresError, OSError) as exc:
		logger.warning("postgres_ping_failed", extra={"error": str(exc)})
		return False
	return True
