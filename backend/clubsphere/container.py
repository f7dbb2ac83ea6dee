"""Wires repositories and services around the shared pool and redis client."""

from __future__ import annotations

from dataclasses import dataclass

import asyncpg
import redis.asyncio as redis

from clubsphere.domain.access.authority import RoleAuthority
from clubsphere.domain.access.principal import PrincipalResolver
from clubsphere.domain.access.repo import UsersRepository
from clubsphere.domain.clubs.gate import ResourceGate
from clubsphere.domain.clubs.repo import ClubsRepository
from clubsphere.domain.clubs.service import ClubService
from clubsphere.domain.lifecycle.capacity import CapacityEnforcer
from clubsphere.domain.lifecycle.engine import LifecycleEngine
from clubsphere.domain.lifecycle.expiry import ExpirySweeper
from clubsphere.domain.lifecycle.repo import MembershipsRepository, RegistrationsRepository
from clubsphere.domain.payments.checkout import CheckoutService
from clubsphere.domain.payments.ledger import PaymentLedger
from clubsphere.domain.payments.processor import PaymentProcessor
from clubsphere.domain.payments.repo import PaymentsRepository
from clubsphere.infra.identity import IdentityProvider
from clubsphere.infra.rate_limit import RateLimiter
from clubsphere.settings import Settings


@dataclass
class ServiceContainer:
    settings: Settings
    pool: asyncpg.Pool
    redis: redis.Redis
    resolver: PrincipalResolver
    authority: RoleAuthority
    gate: ResourceGate
    clubs: ClubService
    ledger: PaymentLedger
    checkout: CheckoutService
    lifecycle: LifecycleEngine
    sweeper: ExpirySweeper
    rate_limiter: RateLimiter


def build_container(
    *,
    config: Settings,
    pool: asyncpg.Pool,
    redis_client: redis.Redis,
    identity_provider: IdentityProvider,
    processor: PaymentProcessor,
    users: UsersRepository | None = None,
    clubs: ClubsRepository | None = None,
    payments: PaymentsRepository | None = None,
    memberships: MembershipsRepository | None = None,
    registrations: RegistrationsRepository | None = None,
) -> ServiceContainer:
    """Build every component; repositories may be overridden by tests."""
    users = users or UsersRepository(pool)
    clubs = clubs or ClubsRepository(pool)
    payments = payments or PaymentsRepository(pool)
    memberships = memberships or MembershipsRepository(pool)
    registrations = registrations or RegistrationsRepository(pool)

    authority = RoleAuthority(users)
    gate = ResourceGate(clubs, authority)
    ledger = PaymentLedger(payments, processor, currency=config.settlement_currency)
    lifecycle = LifecycleEngine(
        gate=gate,
        ledger=ledger,
        memberships=memberships,
        registrations=registrations,
        capacity=CapacityEnforcer(registrations),
    )
    return ServiceContainer(
        settings=config,
        pool=pool,
        redis=redis_client,
        resolver=PrincipalResolver(identity_provider),
        authority=authority,
        gate=gate,
        clubs=ClubService(clubs, gate, authority),
        ledger=ledger,
        checkout=CheckoutService(gate, ledger),
        lifecycle=lifecycle,
        sweeper=ExpirySweeper(payments, memberships, ttl_hours=config.pending_payment_ttl_hours),
        rate_limiter=RateLimiter(redis_client),
    )
