from datetime import datetime

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from cloudstage.db.base import Base


class AppUser(Base):
    """
    Viewer account (phone-number login).
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)

    fcm_token: Mapped[str | None] = mapped_column(String(512), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        nullable=False,
    )
