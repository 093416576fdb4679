from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column

from cloudstage.db.base import Base


class Artist(Base):
    __tablename__ = "artists"

    # Auth provider UID
    id = Column(String(128), primary_key=True)

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    ## Premium subscription
    is_premium: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false",
    )

    premium_payment_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    # Device token for push notifications
    fcm_token: Mapped[str | None] = mapped_column(String(512), nullable=True)

    def __repr__(self) -> str:
        return f"<Artist id={self.id} name={self.name} premium={self.is_premium}>"
