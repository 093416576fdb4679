from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from cloudstage.schemas.fulfillment import BuyerContact


class TicketRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    event_id: str
    buyer_name: str | None
    buyer_email: str | None
    buyer_phone: str | None
    price_paid: Decimal
    payment_id: str | None
    is_test: bool
    created_at: datetime


class TicketSummary(BaseModel):
    """
    Public listing view; buyer contact details are left out.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    event_id: str
    price_paid: Decimal
    is_test: bool
    created_at: datetime


class TicketCreateResult(BaseModel):
    """
    created=False means a ticket for (user_id, event_id) already existed.
    """
    ticket: TicketRead
    created: bool


class UnpaidBookingRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    event_id: str = Field(..., min_length=1)
    buyer: BuyerContact
