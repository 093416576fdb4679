# cloudstage/api/v1/webhooks.py

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from cloudstage.core.container import ServiceContainer
from cloudstage.api.deps import get_services
from cloudstage.schemas.webhooks import WebhookAck
from cloudstage.services.webhook_service import (
    fulfill,
    verify_and_parse_cashfree,
    verify_and_parse_razorpay,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/cashfree-webhook", response_model=WebhookAck)
async def cashfree_webhook(
    request: Request,
    services: ServiceContainer = Depends(get_services),
):
    # Signatures cover the literal bytes; never re-serialize before verifying
    payload = await request.body()
    signature = request.headers.get("x-webhook-signature")
    timestamp = request.headers.get("x-webhook-timestamp")

    if not signature or not timestamp:
        logger.warning("Cashfree webhook: missing signature headers")
        raise HTTPException(status_code=400, detail="Missing required headers")

    verified = verify_and_parse_cashfree(
        payload,
        signature=signature,
        timestamp=timestamp,
        secret=services.cashfree.webhook_secret,
    )

    return await fulfill(services.session_factory, verified)


@router.post("/razorpay-webhook", response_model=WebhookAck)
async def razorpay_webhook(
    request: Request,
    services: ServiceContainer = Depends(get_services),
):
    payload = await request.body()
    signature = request.headers.get("x-razorpay-signature")

    if not signature:
        logger.warning("Razorpay webhook: missing signature header")
        raise HTTPException(status_code=400, detail="Signature missing")

    verified = verify_and_parse_razorpay(
        payload,
        signature=signature,
        secret=services.razorpay.webhook_secret,
    )

    return await fulfill(services.session_factory, verified)
