"""Apply bundled SQL migrations in version order."""

from __future__ import annotations

from pathlib import Path

import asyncpg

from clubsphere.obs.logging import get_logger

logger = get_logger("clubsphere.migrations")

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"


def discover(directory: Path = MIGRATIONS_DIR) -> list[tuple[str, Path]]:
	"""Return (version, path) pairs sorted by version; version is the filename prefix."""
	found: list[tuple[str, Path]] = []
	for path in sorted(directory.glob("*.sql")):
		version = path.stem.split("_", 1)[0]
		found.append((version, path))
	return found


async def apply_pending(pool: asyncpg.Pool, directory: Path = MIGRATIONS_DIR) -> list[str]:
	applied: list[str] = []
	async with pool.acquire() as conn:
		await conn.execute(
			"""
			CREATE TABLE IF NOT EXISTS schema_migrations (
				version TEXT PRIMARY KEY,
				applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
			)
			"""
		)
		done = {row["version"] for row in await conn.fetch("SELECT version FROM schema_migrations")}
		for version, path in discover(directory):
			if version in done:
				continue
			sql = path.read_text(encoding="utf-8")
			async with conn.transaction():
				await conn.execute(sql)
				await conn.execute("INSERT INTO schema_migrations (version) VALUES ($1)", version)
			logger.info("migration_applied", extra={"version": version, "file": path.name})
			applied.append(version)
	return applied


async def current_version(pool: asyncpg.Pool) -> str | None:
	async with pool.acquire() as conn:
		return await conn.fetchval("SELECT version FROM schema_migrations ORDER BY version DESC LIMIT 1")
