from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy import JSON, String, Text, DateTime

from cloudstage.db.base import Base


class ReconciliationEntry(Base):
    """
    A verified payment whose fulfillment failed.
    The provider has already been told 200, so these need manual follow-up.
    """
    __tablename__ = "reconciliation_entries"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    provider: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    payment_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    order_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # "ticket" | "premium"
    dispatch_kind: Mapped[str] = mapped_column(String(20), nullable=False)

    # Serialized FulfillmentRequest, enough to replay the dispatch
    payload: Mapped[dict] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=False,
        default=dict,
    )

    # Keep API “safe”: we will only expose error_summary; error_raw remains internal.
    error_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    error_raw: Mapped[str | None] = mapped_column(Text, nullable=True)

    failed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        nullable=False,
        index=True,
    )

    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
