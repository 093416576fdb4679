from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cloudstage.core.exceptions import StoreWriteError
from cloudstage.models.artist import Artist

logger = logging.getLogger(__name__)


async def get_artist(db: AsyncSession, artist_id: str) -> Artist | None:
    res = await db.execute(select(Artist).where(Artist.id == artist_id))
    return res.scalar_one_or_none()


async def set_premium(db: AsyncSession, *, artist_id: str, payment_id: str) -> Artist:
    """
    Flag the artist as premium. Setting it twice is harmless.
    """
    try:
        artist = await get_artist(db, artist_id)
        if not artist:
            # Payment already captured; this needs a human to match it up
            raise StoreWriteError(f"Artist {artist_id} not found for premium payment {payment_id}")

        artist.is_premium = True
        artist.premium_payment_id = payment_id
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StoreWriteError(f"Premium upgrade failed for artist {artist_id}: {e}") from e

    logger.info("Artist %s upgraded to premium (payment %s)", artist_id, payment_id)
    return artist
