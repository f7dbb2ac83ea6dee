"""Payment intent, confirmation and webhook routes."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Request

from clubsphere.api import schemas
from clubsphere.api.deps import get_container, get_principal, require_admin
from clubsphere.container import ServiceContainer
from clubsphere.domain.access.models import Actor, Principal
from clubsphere.domain.errors import WebhookSignatureError
from clubsphere.domain.payments.models import PaymentType
from clubsphere.obs import metrics as obs_metrics
from clubsphere.obs.logging import get_logger

router = APIRouter(prefix="/payments", tags=["payments"])

logger = get_logger("clubsphere.payments")


@router.post("/create-intent", response_model=schemas.CreateIntentResponse)
async def create_intent(
    payload: schemas.CreateIntentRequest,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.CreateIntentResponse:
    await container.rate_limiter.enforce(
        "payment_intent",
        principal.email,
        limit=container.settings.payment_intent_rate_limit_per_minute,
    )
    intent = await container.checkout.start(principal, PaymentType(payload.type), payload.target_id)
    return schemas.CreateIntentResponse(
        processor_ref=intent.payment.processor_ref,
        client_secret=intent.client_secret,
        amount=intent.payment.amount,
        currency=intent.payment.currency,
    )


@router.post("/confirm/{processor_ref}", response_model=schemas.PaymentOut)
async def confirm_payment(
    processor_ref: str,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.PaymentOut:
    payment = await container.ledger.sync_with_processor(principal.email, processor_ref)
    return schemas.PaymentOut.of(payment)


@router.post("/webhook", response_model=schemas.WebhookAck)
async def payment_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(default=None, alias="Stripe-Signature"),
    container: ServiceContainer = Depends(get_container),
) -> schemas.WebhookAck:
    payload = await request.body()
    try:
        notification = container.ledger.parse_notification(payload, stripe_signature)
    except WebhookSignatureError:
        obs_metrics.inc_webhook_delivery("rejected")
        logger.warning("payment.webhook_rejected")
        raise
    if notification is None:
        obs_metrics.inc_webhook_delivery("ignored")
        return schemas.WebhookAck()
    payment = await container.ledger.handle_notification(notification)
    obs_metrics.inc_webhook_delivery("applied" if payment is not None else "unknown_ref")
    return schemas.WebhookAck()


@router.get("/my-payments", response_model=List[schemas.PaymentOut])
async def my_payments(
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> List[schemas.PaymentOut]:
    payments = await container.ledger.list_for_user(principal.email)
    return [schemas.PaymentOut.of(item) for item in payments]


@router.get("/all", response_model=List[schemas.PaymentOut])
async def all_payments(
    actor: Actor = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
) -> List[schemas.PaymentOut]:
    payments = await container.ledger.list_all()
    return [schemas.PaymentOut.of(item) for item in payments]


@router.get("/check/{payment_type}/{target_id}", response_model=schemas.PaymentCheck)
async def check_payment(
    payment_type: PaymentType,
    target_id: UUID,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.PaymentCheck:
    paid = await container.ledger.has_completed_payment(principal.email, payment_type, target_id)
    return schemas.PaymentCheck(has_paid=paid)


@router.get("/config", response_model=schemas.PaymentConfigOut)
async def payment_config(container: ServiceContainer = Depends(get_container)) -> schemas.PaymentConfigOut:
    return schemas.PaymentConfigOut(
        publishable_key=container.settings.stripe_publishable_key,
        currency=container.settings.settlement_currency,
    )
