"""Expiry of payments and memberships stuck waiting on payment."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from clubsphere.domain.lifecycle.repo import MembershipsRepository
from clubsphere.domain.payments.repo import PaymentsRepository
from clubsphere.obs import metrics as obs_metrics
from clubsphere.obs.logging import get_logger

logger = get_logger("clubsphere.lifecycle")


class ExpirySweeper:
    def __init__(
        self,
        payments: PaymentsRepository,
        memberships: MembershipsRepository,
        *,
        ttl_hours: int,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._payments = payments
        self._memberships = memberships
        self._ttl = timedelta(hours=ttl_hours)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def run_once(self) -> dict[str, int]:
        """Fail stale pending payments and expire stale pendingPayment memberships."""
        cutoff = self._clock() - self._ttl
        failed = await self._payments.fail_stale_pending(cutoff)
        expired = await self._memberships.expire_pending(cutoff)
        obs_metrics.inc_expired("payments", failed)
        obs_metrics.inc_expired("memberships", expired)
        if failed or expired:
            logger.info(
                "lifecycle.expired",
                extra={"payments_failed": failed, "memberships_expired": expired, "cutoff": cutoff.isoformat()},
            )
        return {"payments": failed, "memberships": expired}
