"""Lifecycle engine for memberships and event registrations.

Each join or registration walks the same path: the resource gate, the
active-record check, capacity (events only), the payment check when a
fee applies, then the insert. The partial unique indexes behind the
insert settle races that slip past the active-record check.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from clubsphere.domain.access.models import Principal
from clubsphere.domain.clubs.gate import ResourceGate
from clubsphere.domain.errors import AlreadyExists, DomainError, Forbidden, InvalidInput, NotFound
from clubsphere.domain.lifecycle.capacity import CapacityEnforcer
from clubsphere.domain.lifecycle.models import (
    EventRegistration,
    Membership,
    MembershipStatus,
    RegistrationStatus,
)
from clubsphere.domain.lifecycle.repo import MembershipsRepository, RegistrationsRepository
from clubsphere.domain.payments.ledger import PaymentLedger
from clubsphere.domain.payments.models import PaymentType
from clubsphere.obs import metrics as obs_metrics
from clubsphere.obs.logging import get_logger

logger = get_logger("clubsphere.lifecycle")


class LifecycleEngine:
    def __init__(
        self,
        *,
        gate: ResourceGate,
        ledger: PaymentLedger,
        memberships: MembershipsRepository,
        registrations: RegistrationsRepository,
        capacity: CapacityEnforcer,
    ) -> None:
        self._gate = gate
        self._ledger = ledger
        self._memberships = memberships
        self._registrations = registrations
        self._capacity = capacity

    async def join(self, principal: Principal, club_id: UUID, payment_ref: Optional[str] = None) -> Membership:
        try:
            club = await self._gate.require_approved_club(club_id)
            if await self._memberships.find_active(principal.email, club_id) is not None:
                raise AlreadyExists("already_member")
            applied_ref = None
            if club.requires_payment:
                payment = await self._ledger.require_completed_payment(
                    principal.email, PaymentType.MEMBERSHIP, club_id, payment_ref
                )
                applied_ref = payment.processor_ref
            membership = await self._memberships.insert_active(
                user_email=principal.email,
                club_id=club_id,
                payment_ref=applied_ref,
            )
        except DomainError as exc:
            obs_metrics.inc_lifecycle_outcome("membership", type(exc).detail)
            raise
        obs_metrics.inc_lifecycle_outcome("membership", "active")
        logger.info(
            "membership.joined",
            extra={
                "membership_id": str(membership.id),
                "club_id": str(club_id),
                "user_email": principal.email,
                "paid": applied_ref is not None,
            },
        )
        return membership

    async def register(self, principal: Principal, event_id: UUID, payment_ref: Optional[str] = None) -> EventRegistration:
        try:
            event, club = await self._gate.require_event(event_id)
            if await self._registrations.find_registered(principal.email, event_id) is not None:
                raise AlreadyExists("already_registered")
            await self._capacity.check_and_reserve(event)
            applied_ref = None
            if event.requires_payment:
                payment = await self._ledger.require_completed_payment(
                    principal.email, PaymentType.EVENT, event_id, payment_ref
                )
                applied_ref = payment.processor_ref
            registration = await self._registrations.insert_registered(
                user_email=principal.email,
                event_id=event_id,
                club_id=club.id,
                payment_ref=applied_ref,
            )
        except DomainError as exc:
            obs_metrics.inc_lifecycle_outcome("registration", type(exc).detail)
            raise
        obs_metrics.inc_lifecycle_outcome("registration", "registered")
        logger.info(
            "registration.created",
            extra={
                "registration_id": str(registration.id),
                "event_id": str(event_id),
                "user_email": principal.email,
                "paid": applied_ref is not None,
            },
        )
        return registration

    async def cancel_membership(self, principal: Principal, membership_id: UUID) -> Membership:
        membership = await self._memberships.get(membership_id)
        if membership is None:
            raise NotFound("membership_not_found")
        if membership.user_email != principal.email:
            raise Forbidden("not_owner")
        if membership.status is MembershipStatus.CANCELLED:
            return membership
        if membership.status is MembershipStatus.EXPIRED:
            raise InvalidInput("membership_not_active")
        cancelled = await self._memberships.mark_cancelled(membership_id)
        if cancelled is None:
            # lost a race with another cancel or the expiry sweep
            return await self._memberships.get(membership_id) or membership
        obs_metrics.inc_lifecycle_cancelled("membership")
        logger.info(
            "membership.cancelled",
            extra={"membership_id": str(membership_id), "club_id": str(membership.club_id), "user_email": principal.email},
        )
        return cancelled

    async def cancel_registration(self, principal: Principal, registration_id: UUID) -> EventRegistration:
        registration = await self._registrations.get(registration_id)
        if registration is None:
            raise NotFound("registration_not_found")
        if registration.user_email != principal.email:
            raise Forbidden("not_owner")
        if registration.status is RegistrationStatus.CANCELLED:
            return registration
        cancelled = await self._registrations.mark_cancelled(registration_id)
        if cancelled is None:
            return await self._registrations.get(registration_id) or registration
        obs_metrics.inc_lifecycle_cancelled("registration")
        logger.info(
            "registration.cancelled",
            extra={
                "registration_id": str(registration_id),
                "event_id": str(registration.event_id),
                "user_email": principal.email,
            },
        )
        return cancelled

    async def is_member(self, principal: Principal, club_id: UUID) -> bool:
        return await self._memberships.find_active(principal.email, club_id) is not None

    async def is_registered(self, principal: Principal, event_id: UUID) -> bool:
        return await self._registrations.find_registered(principal.email, event_id) is not None

    async def memberships_of(self, principal: Principal) -> list[Membership]:
        return await self._memberships.list_for_user(principal.email)

    async def registrations_of(self, principal: Principal) -> list[EventRegistration]:
        return await self._registrations.list_for_user(principal.email)

    async def active_member_count(self, club_id: UUID) -> int:
        return await self._memberships.active_count(club_id)

    async def registered_count(self, event_id: UUID) -> int:
        return await self._registrations.registered_count(event_id)
