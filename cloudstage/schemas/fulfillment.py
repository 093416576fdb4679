from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel


class DispatchKind(str, Enum):
    ticket = "ticket"
    premium = "premium"
    unrecognized = "unrecognized"


class BuyerContact(BaseModel):
    customer_id: str | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None


class DispatchMetadata(BaseModel):
    """
    The metadata bag attached at order creation and echoed back by the provider.
    """
    event_id: str | None = None
    user_id: str | None = None
    plan_name: str | None = None


class FulfillmentRequest(BaseModel):
    """
    Provider-neutral view of a verified, fully paid order.
    Also the replay payload stored with reconciliation entries.
    """
    provider: str
    payment_id: str
    order_ref: str | None = None
    amount: Decimal
    metadata: DispatchMetadata
    buyer: BuyerContact


class FulfillmentOutcome(BaseModel):
    kind: DispatchKind
    created: bool = False
    ticket_id: str | None = None
    artist_id: str | None = None
