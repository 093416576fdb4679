from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cloudstage.core.exceptions import NotFoundError
from cloudstage.models.event import Event, ModerationStatus

logger = logging.getLogger(__name__)


async def get_event(db: AsyncSession, event_id: str) -> Event:
    res = await db.execute(select(Event).where(Event.id == event_id))
    event = res.scalar_one_or_none()
    if not event:
        raise NotFoundError(f"Event {event_id} not found")
    return event


async def list_events_by_status(
    db: AsyncSession,
    *,
    status: ModerationStatus,
    limit: int = 100,
) -> list[Event]:
    res = await db.execute(
        select(Event)
        .where(Event.moderation_status == status)
        .order_by(Event.created_at.desc())
        .limit(limit)
    )
    return list(res.scalars().all())


async def set_moderation_status(
    db: AsyncSession,
    *,
    event_id: str,
    status: ModerationStatus,
) -> Event:
    event = await get_event(db, event_id)
    previous = event.moderation_status
    event.moderation_status = status
    await db.commit()

    logger.info("Event %s moderation %s -> %s", event_id, previous.value, status.value)
    return event


async def set_boost(
    db: AsyncSession,
    *,
    event_id: str,
    is_boosted: bool,
    amount: Decimal,
) -> Event:
    event = await get_event(db, event_id)
    event.is_boosted = is_boosted
    event.boost_amount = amount if is_boosted else None
    await db.commit()
    return event
