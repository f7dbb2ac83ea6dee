"""Payment ledger: intents, confirmations and failures.

The ledger owns payment state only. It never creates or changes
memberships or registrations; the lifecycle engine reads from it.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional
from uuid import UUID

from clubsphere.domain.errors import InvalidAmount, NotFound, PaymentRequired
from clubsphere.domain.payments.models import Payment, PaymentIntent, PaymentStatus, PaymentType
from clubsphere.domain.payments.processor import PaymentProcessor, ProcessorNotification, ProcessorOutcome
from clubsphere.domain.payments.repo import PaymentsRepository
from clubsphere.obs import metrics as obs_metrics
from clubsphere.obs.logging import get_logger

logger = get_logger("clubsphere.payments")


# ISO 4217 currencies whose minor unit is not a hundredth
_ZERO_DECIMAL_CURRENCIES = frozenset(
    {"bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga", "pyg", "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf"}
)
_THREE_DECIMAL_CURRENCIES = frozenset({"bhd", "jod", "kwd", "omr", "tnd"})


def currency_exponent(currency: str) -> int:
    code = currency.lower()
    if code in _ZERO_DECIMAL_CURRENCIES:
        return 0
    if code in _THREE_DECIMAL_CURRENCIES:
        return 3
    return 2


def to_minor_units(amount: Decimal, currency: str = "usd") -> int:
    scaled = amount.scaleb(currency_exponent(currency))
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentLedger:
    def __init__(self, payments: PaymentsRepository, processor: PaymentProcessor, *, currency: str) -> None:
        self._payments = payments
        self._processor = processor
        self._currency = currency

    async def create_intent(self, user_email: str, type_: PaymentType, target_id: UUID, amount: Decimal) -> PaymentIntent:
        if amount is None or amount <= 0:
            raise InvalidAmount()
        intent = await self._processor.create_intent(
            amount_minor=to_minor_units(amount, self._currency),
            currency=self._currency,
            metadata={"user_email": user_email, "type": type_.value, "target_id": str(target_id)},
        )
        payment = await self._payments.insert_pending(
            user_email=user_email,
            type_=type_,
            target_id=target_id,
            amount=amount,
            currency=self._currency,
            processor_ref=intent.processor_ref,
        )
        obs_metrics.inc_payment_transition(PaymentStatus.PENDING.value)
        logger.info(
            "payment.intent_created",
            extra={
                "payment_id": str(payment.id),
                "processor_ref": payment.processor_ref,
                "user_email": user_email,
                "payment_type": type_.value,
                "target_id": str(target_id),
            },
        )
        return PaymentIntent(payment=payment, client_secret=intent.client_secret)

    async def confirm(self, processor_ref: str) -> Payment:
        """Mark a pending payment completed; replays return the stored record unchanged."""
        updated = await self._payments.mark_completed(processor_ref)
        if updated is not None:
            obs_metrics.inc_payment_transition(PaymentStatus.COMPLETED.value)
            logger.info("payment.confirmed", extra={"processor_ref": processor_ref, "user_email": updated.user_email})
            return updated
        existing = await self._require(processor_ref)
        if existing.status is PaymentStatus.COMPLETED:
            obs_metrics.inc_payment_confirm_replay()
        else:
            # cancelled or expired before the processor reported success; stays failed
            logger.warning("payment.confirm_after_failure", extra={"processor_ref": processor_ref})
        return existing

    async def mark_failed(self, processor_ref: str) -> Payment:
        updated = await self._payments.mark_failed(processor_ref)
        if updated is not None:
            obs_metrics.inc_payment_transition(PaymentStatus.FAILED.value)
            logger.info("payment.failed", extra={"processor_ref": processor_ref, "user_email": updated.user_email})
            return updated
        return await self._require(processor_ref)

    async def apply_outcome(self, processor_ref: str, outcome: ProcessorOutcome) -> Payment:
        if outcome is ProcessorOutcome.SUCCEEDED:
            return await self.confirm(processor_ref)
        if outcome is ProcessorOutcome.FAILED:
            return await self.mark_failed(processor_ref)
        return await self._require(processor_ref)

    async def handle_notification(self, notification: ProcessorNotification) -> Optional[Payment]:
        """Apply a verified processor notification; unknown refs are logged and dropped."""
        if await self._payments.get_by_ref(notification.processor_ref) is None:
            logger.warning(
                "payment.notification_unknown_ref",
                extra={"processor_ref": notification.processor_ref, "event_type": notification.event_type},
            )
            return None
        if notification.outcome is ProcessorOutcome.PENDING:
            logger.info(
                "payment.attempt_not_final",
                extra={"processor_ref": notification.processor_ref, "event_type": notification.event_type},
            )
        return await self.apply_outcome(notification.processor_ref, notification.outcome)

    async def sync_with_processor(self, user_email: str, processor_ref: str) -> Payment:
        """Poll the processor for a payment the caller owns and apply the result."""
        payment = await self._require(processor_ref)
        if payment.user_email != user_email:
            raise NotFound("payment_not_found")
        if payment.status is not PaymentStatus.PENDING:
            return payment
        outcome = await self._processor.retrieve_outcome(processor_ref)
        return await self.apply_outcome(processor_ref, outcome)

    def parse_notification(self, payload: bytes, signature: Optional[str]) -> Optional[ProcessorNotification]:
        return self._processor.parse_notification(payload, signature)

    async def require_completed_payment(
        self,
        user_email: str,
        type_: PaymentType,
        target_id: UUID,
        payment_ref: Optional[str],
    ) -> Payment:
        """Return the completed payment behind ``payment_ref`` or fail PaymentRequired.

        The payment must belong to the same user, type and target.
        """
        if not payment_ref:
            raise PaymentRequired()
        payment = await self._payments.get_by_ref(payment_ref)
        if payment is None or not payment.matches(user_email, type_, target_id):
            raise PaymentRequired("payment_not_found")
        if not payment.is_completed:
            raise PaymentRequired("payment_not_completed")
        return payment

    async def has_completed_payment(self, user_email: str, type_: PaymentType, target_id: UUID) -> bool:
        return await self._payments.has_completed(user_email, type_, target_id)

    async def get(self, processor_ref: str) -> Optional[Payment]:
        return await self._payments.get_by_ref(processor_ref)

    async def list_for_user(self, user_email: str) -> list[Payment]:
        return await self._payments.list_for_user(user_email)

    async def list_all(self) -> list[Payment]:
        return await self._payments.list_all()

    async def _require(self, processor_ref: str) -> Payment:
        payment = await self._payments.get_by_ref(processor_ref)
        if payment is None:
            raise NotFound("payment_not_found")
        return payment
