"""Prices a membership or event and opens a payment intent for it."""

from __future__ import annotations

from uuid import UUID

from clubsphere.domain.access.models import Principal
from clubsphere.domain.clubs.gate import ResourceGate
from clubsphere.domain.errors import InvalidAmount
from clubsphere.domain.payments.ledger import PaymentLedger
from clubsphere.domain.payments.models import PaymentIntent, PaymentType


class CheckoutService:
    def __init__(self, gate: ResourceGate, ledger: PaymentLedger) -> None:
        self._gate = gate
        self._ledger = ledger

    async def start(self, principal: Principal, type_: PaymentType, target_id: UUID) -> PaymentIntent:
        if type_ is PaymentType.MEMBERSHIP:
            club = await self._gate.require_approved_club(target_id)
            amount = club.fee
        else:
            event, _ = await self._gate.require_event(target_id)
            amount = event.fee if event.is_paid else 0
        if amount <= 0:
            raise InvalidAmount("nothing_to_pay")
        return await self._ledger.create_intent(principal.email, type_, target_id, amount)
