from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from cloudstage.schemas.fulfillment import (
    DispatchKind,
    DispatchMetadata,
    FulfillmentOutcome,
    FulfillmentRequest,
)
from cloudstage.services.artist_service import set_premium
from cloudstage.services.ticket_service import create_ticket

logger = logging.getLogger(__name__)


def classify(metadata: DispatchMetadata) -> DispatchKind:
    """
    Decide what a paid order was for, from the metadata set at checkout.
    Anything ambiguous is unrecognized; we never guess.
    """
    if metadata.plan_name and not metadata.event_id:
        if metadata.user_id:
            return DispatchKind.premium
        return DispatchKind.unrecognized

    if metadata.event_id and metadata.user_id:
        return DispatchKind.ticket

    return DispatchKind.unrecognized


async def dispatch_fulfillment(
    db: AsyncSession,
    request: FulfillmentRequest,
) -> FulfillmentOutcome:
    """
    Apply a verified payment. No retries here: store errors propagate to the caller.
    """
    kind = classify(request.metadata)

    if kind is DispatchKind.premium:
        artist = await set_premium(
            db,
            artist_id=request.metadata.user_id,
            payment_id=request.payment_id,
        )
        return FulfillmentOutcome(kind=kind, created=True, artist_id=artist.id)

    if kind is DispatchKind.ticket:
        result = await create_ticket(
            db,
            user_id=request.metadata.user_id,
            event_id=request.metadata.event_id,
            price_paid=request.amount,
            buyer=request.buyer,
            payment_id=request.payment_id,
            is_test=False,
        )
        logger.info(
            "%s: ticket %s for event %s user %s (created=%s)",
            request.provider,
            result.ticket.id,
            request.metadata.event_id,
            request.metadata.user_id,
            result.created,
        )
        return FulfillmentOutcome(kind=kind, created=result.created, ticket_id=result.ticket.id)

    logger.warning(
        "%s: paid order %s (payment %s) has unrecognized metadata %s; no action taken",
        request.provider,
        request.order_ref,
        request.payment_id,
        request.metadata.model_dump(),
    )
    return FulfillmentOutcome(kind=kind)
