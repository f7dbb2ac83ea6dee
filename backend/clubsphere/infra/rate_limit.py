"""Simple Redis-backed rate limiting utilities."""

from __future__ import annotations

import math
import time
from typing import Optional

import redis.asyncio as redis

from clubsphere.domain.errors import DomainError


class RateLimitExceeded(DomainError):
	"""Raised when the rate limit has been hit."""

	status_code = 429
	detail = "rate_limited"


class RateLimiter:
	def __init__(self, client: redis.Redis) -> None:
		self._client = client

	async def allow(
		self,
		kind: str,
		actor_id: str,
		*,
		limit: int,
		window_seconds: int = 60,
		now: Optional[float] = None,
	) -> bool:
		"""Return True when the operation is still within the allowed budget."""

		if limit <= 0:
			return False
		now = now or time.time()
		window = max(1, int(window_seconds))
		slot = int(math.floor(now / window))
		key = f"rl:{kind}:{actor_id}:{slot}:{window}"
		async with self._client.pipeline(transaction=True) as pipe:
			pipe.incr(key)
			pipe.expire(key, window)
			count, _ = await pipe.execute()
		return int(count) <= limit

	async def enforce(self, kind: str, actor_id: str, *, limit: int, window_seconds: int = 60) -> None:
		if not await self.allow(kind, actor_id, limit=limit, window_seconds=window_seconds):
			raise RateLimitExceeded()
