from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from cloudstage.models.event import ModerationStatus


class EventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    artist_id: str
    ticket_price: Decimal
    moderation_status: ModerationStatus
    is_boosted: bool
    boost_amount: Decimal | None
    starts_at: datetime | None
    created_at: datetime


class BoostRequest(BaseModel):
    is_boosted: bool
    amount: Decimal = Field(default=Decimal("0"), ge=0)


class NotificationResult(BaseModel):
    success: bool
    message: str
    token_count: int = 0
    success_count: int = 0
    failure_count: int = 0


class ModerationResult(BaseModel):
    event: EventRead
    notification: NotificationResult | None = None


class ReconciliationEntryRead(BaseModel):
    """
    Safe view: error_raw is never exposed.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    provider: str
    payment_id: str
    order_ref: str | None
    dispatch_kind: str
    error_summary: str | None
    failed_at: datetime
    resolved_at: datetime | None
