from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from cloudstage.db.base import Base


class Ticket(Base):
    """
    One admission to one event for one user.
    Tickets are never updated or deleted once written.
    """
    __tablename__ = "tickets"
    __table_args__ = (
        # Backstop for the find-then-insert check in ticket_service
        UniqueConstraint("user_id", "event_id", name="uq_tickets_user_event"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    event_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)

    buyer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    buyer_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    buyer_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)

    price_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # None for test-mode bookings
    payment_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    is_test: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Ticket id={self.id} user_id={self.user_id} event_id={self.event_id}>"
