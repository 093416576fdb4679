from sqlalchemy import String, Enum, DateTime, ForeignKey, Numeric, Boolean
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from decimal import Decimal
import uuid
import enum

from cloudstage.db.base import Base


class ModerationStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class Event(Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(
        String(128),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    artist_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("artists.id"),
        nullable=False,
        index=True,
    )

    ticket_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)

    moderation_status: Mapped[ModerationStatus] = mapped_column(
        Enum(ModerationStatus, name="moderation_status_enum"),
        nullable=False,
        default=ModerationStatus.pending,
        index=True,
    )

    is_boosted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    boost_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    starts_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        nullable=False,
    )
