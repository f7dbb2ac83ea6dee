"""Stripe adapter for the payment ledger.

The Stripe SDK is synchronous, so network calls run on a worker thread.
Stripe errors surface as ``PaymentProcessorError``; webhook payloads that
fail verification raise ``WebhookSignatureError``.
"""

from __future__ import annotations

import asyncio
from typing import Mapping, Optional

import stripe

from clubsphere.domain.errors import PaymentProcessorError, WebhookSignatureError
from clubsphere.domain.payments.processor import ProcessorIntent, ProcessorNotification, ProcessorOutcome
from clubsphere.obs.logging import get_logger

logger = get_logger("clubsphere.payments")

_EVENT_OUTCOMES = {
	"payment_intent.succeeded": ProcessorOutcome.SUCCEEDED,
	# a declined attempt leaves the intent open for another payment method
	"payment_intent.payment_failed": ProcessorOutcome.PENDING,
	"payment_intent.canceled": ProcessorOutcome.FAILED,
}

_STATUS_OUTCOMES = {
	"succeeded": ProcessorOutcome.SUCCEEDED,
	"canceled": ProcessorOutcome.FAILED,
}


class StripePaymentProcessor:
	def __init__(self, secret_key: Optional[str], webhook_secret: Optional[str]) -> None:
		self._secret_key = secret_key
		self._webhook_secret = webhook_secret

	def _require_key(self) -> str:
		if not self._secret_key:
			raise PaymentProcessorError("stripe_not_configured")
		return self._secret_key

	async def create_intent(
		self,
		*,
		amount_minor: int,
		currency: str,
		metadata: Mapping[str, str],
	) -> ProcessorIntent:
		api_key = self._require_key()
		try:
			intent = await asyncio.to_thread(
				stripe.PaymentIntent.create,
				api_key=api_key,
				amount=amount_minor,
				currency=currency,
				metadata=dict(metadata),
				automatic_payment_methods={"enabled": True},
			)
		except stripe.StripeError as exc:
			logger.warning("stripe_create_intent_failed", extra={"error": str(exc)})
			raise PaymentProcessorError(str(exc)) from exc
		return ProcessorIntent(processor_ref=intent["id"], client_secret=intent["client_secret"])

	async def retrieve_outcome(self, processor_ref: str) -> ProcessorOutcome:
		api_key = self._require_key()
		try:
			intent = await asyncio.to_thread(stripe.PaymentIntent.retrieve, processor_ref, api_key=api_key)
		except stripe.StripeError as exc:
			logger.warning("stripe_retrieve_intent_failed", extra={"processor_ref": processor_ref, "error": str(exc)})
			raise PaymentProcessorError(str(exc)) from exc
		return _STATUS_OUTCOMES.get(intent["status"], ProcessorOutcome.PENDING)

	def parse_notification(self, payload: bytes, signature: Optional[str]) -> Optional[ProcessorNotification]:
		if not self._webhook_secret:
			raise PaymentProcessorError("stripe_webhook_not_configured")
		if not signature:
			raise WebhookSignatureError("missing_signature")
		try:
			event = stripe.Webhook.construct_event(payload, signature, self._webhook_secret)
		except stripe.SignatureVerificationError as exc:
			raise WebhookSignatureError("invalid_signature") from exc
		except ValueError as exc:
			raise WebhookSignatureError("invalid_payload") from exc
		event_type = event["type"]
		outcome = _EVENT_OUTCOMES.get(event_type)
		if outcome is None:
			return None
		return ProcessorNotification(
			processor_ref=event["data"]["object"]["id"],
			outcome=outcome,
			event_type=event_type,
		)
