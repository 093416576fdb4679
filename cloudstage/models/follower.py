from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from cloudstage.db.base import Base


class ArtistFollower(Base):
    __tablename__ = "artist_followers"

    artist_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("artists.id"),
        primary_key=True,
    )

    # Either a viewer (users.id) or another artist (artists.id)
    follower_id: Mapped[str] = mapped_column(String(128), primary_key=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        nullable=False,
    )
