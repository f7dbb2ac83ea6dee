"""Redis connection management.

The client is created at startup and handed to the components that need
it; tests pass a fakeredis instance in its place.
"""

from __future__ import annotations

import redis.asyncio as redis
from redis.exceptions import RedisError

from clubsphere.obs.logging import get_logger

logger = get_logger("clubsphere.redis")


def create_client(url: str) -> redis.Redis:
	return redis.from_url(url, decode_responses=True)


async def ping(client: redis.Redis) -> bool:
	try:
		return bool(await client.ping())
	except (RedisError, OSError) as exc:
		logger.warning("redis_ping_failed", extra={"error": str(exc)})
		return False


async def close_client(client: redis.Redis) -> None:
	await client.aclose()
