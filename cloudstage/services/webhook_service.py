"""
Provider webhooks in two phases.

verify_and_parse_*: authenticate the exact bytes received, then decode them.
Fails fast; nothing is written.

fulfill: apply the payment. Failures are logged and written to the
reconciliation log instead of being reported to the provider, which would
only retry a payment that has already been captured.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cloudstage.core.exceptions import ConfigurationError, WebhookPayloadError
from cloudstage.schemas.fulfillment import BuyerContact, DispatchKind, DispatchMetadata, FulfillmentRequest
from cloudstage.schemas.webhooks import (
    CashfreePaymentSuccessEvent,
    RazorpayOrderPaidEvent,
    WebhookAck,
    cashfree_event_adapter,
    razorpay_event_adapter,
)
from cloudstage.services.fulfillment_service import dispatch_fulfillment
from cloudstage.services.reconciliation_service import record_failure
from cloudstage.services.signature_service import (
    WebhookSignatureContext,
    verify_cashfree,
    verify_razorpay,
)

logger = logging.getLogger(__name__)


@dataclass
class VerifiedWebhook:
    provider: str
    event_type: str
    # None when the event is not a completed payment
    fulfillment: FulfillmentRequest | None


def _decode(adapter, raw_body: bytes, provider: str):
    try:
        return adapter.validate_json(raw_body)
    except ValidationError as e:
        raise WebhookPayloadError(f"{provider} webhook body does not match a known envelope: {e}") from e


# -----------------------------
# Cashfree
# -----------------------------
def cashfree_fulfillment(event: CashfreePaymentSuccessEvent) -> FulfillmentRequest:
    order = event.data.order
    meta = order.order_meta
    customer = event.customer

    return FulfillmentRequest(
        provider="cashfree",
        payment_id=event.data.payment.cf_payment_id,
        order_ref=order.order_id,
        amount=order.order_amount,
        metadata=DispatchMetadata(
            event_id=meta.event_id,
            user_id=meta.user_id or (customer.customer_id if customer else None),
            plan_name=meta.plan_name,
        ),
        buyer=BuyerContact(
            customer_id=customer.customer_id if customer else None,
            name=customer.customer_name if customer else None,
            email=customer.customer_email if customer else None,
            phone=customer.customer_phone if customer else None,
        ),
    )


def verify_and_parse_cashfree(
    raw_body: bytes,
    *,
    signature: str,
    timestamp: str,
    secret: str,
) -> VerifiedWebhook:
    if not secret:
        raise ConfigurationError("Cashfree webhook secret is not configured")

    verify_cashfree(
        WebhookSignatureContext(
            raw_body=raw_body,
            signature_header=signature,
            timestamp_header=timestamp,
            secret=secret,
        )
    )

    event = _decode(cashfree_event_adapter, raw_body, "cashfree")
    logger.info("Cashfree webhook: received event type '%s'", event.type)

    if isinstance(event, CashfreePaymentSuccessEvent) and event.is_paid:
        return VerifiedWebhook("cashfree", event.type, cashfree_fulfillment(event))

    return VerifiedWebhook("cashfree", event.type, None)


# -----------------------------
# Razorpay
# -----------------------------
def razorpay_fulfillment(event: RazorpayOrderPaidEvent) -> FulfillmentRequest:
    order = event.payload.order.entity
    payment = event.payload.payment.entity
    notes = order.notes

    is_premium = notes.type == "premium"
    plan_name = notes.plan_name or ("premium" if is_premium else None)

    return FulfillmentRequest(
        provider="razorpay",
        payment_id=payment.id,
        order_ref=order.id,
        # paise -> rupees
        amount=Decimal(order.amount) / 100,
        metadata=DispatchMetadata(
            event_id=None if is_premium else notes.event_id,
            user_id=notes.user_id,
            plan_name=plan_name,
        ),
        buyer=BuyerContact(
            customer_id=notes.user_id,
            name=notes.buyer_name,
            email=notes.buyer_email or payment.email,
            phone=notes.buyer_phone or payment.contact,
        ),
    )


def verify_and_parse_razorpay(
    raw_body: bytes,
    *,
    signature: str,
    secret: str,
) -> VerifiedWebhook:
    if not secret:
        raise ConfigurationError("Razorpay webhook secret is not configured")

    verify_razorpay(
        WebhookSignatureContext(
            raw_body=raw_body,
            signature_header=signature,
            secret=secret,
        )
    )

    event = _decode(razorpay_event_adapter, raw_body, "razorpay")
    logger.info("Razorpay webhook: received event '%s'", event.event)

    if isinstance(event, RazorpayOrderPaidEvent):
        return VerifiedWebhook("razorpay", event.event, razorpay_fulfillment(event))

    return VerifiedWebhook("razorpay", event.event, None)


# -----------------------------
# Phase two
# -----------------------------
async def fulfill(
    session_factory: async_sessionmaker[AsyncSession],
    verified: VerifiedWebhook,
) -> WebhookAck:
    """
    Never raises: the provider always gets 200 once the payload is verified.
    """
    if verified.fulfillment is None:
        return WebhookAck(ignored=True)

    request = verified.fulfillment
    try:
        async with session_factory() as db:
            outcome = await dispatch_fulfillment(db, request)
    except Exception as e:
        logger.exception(
            "%s webhook: fulfillment failed for payment %s (order %s); needs reconciliation",
            request.provider,
            request.payment_id,
            request.order_ref,
        )
        try:
            entry_id = await record_failure(session_factory, request=request, error=e)
        except Exception:
            logger.exception(
                "%s webhook: could not write reconciliation entry for payment %s payload=%s",
                request.provider,
                request.payment_id,
                request.model_dump_json(),
            )
            return WebhookAck()
        return WebhookAck(reconciliation_id=entry_id)

    return WebhookAck(fulfilled=outcome.kind is not DispatchKind.unrecognized)
