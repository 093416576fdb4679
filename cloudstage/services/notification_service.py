from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cloudstage.core.exceptions import NotFoundError
from cloudstage.integrations.push import PushClient
from cloudstage.models.app_user import AppUser
from cloudstage.models.artist import Artist
from cloudstage.models.follower import ArtistFollower
from cloudstage.schemas.admin import NotificationResult
from cloudstage.services.artist_service import get_artist
from cloudstage.services.event_service import get_event

logger = logging.getLogger(__name__)


async def list_follower_ids(db: AsyncSession, *, artist_id: str) -> list[str]:
    res = await db.execute(
        select(ArtistFollower.follower_id)
        .where(ArtistFollower.artist_id == artist_id)
        .order_by(ArtistFollower.created_at)
    )
    return list(res.scalars().all())


async def resolve_device_tokens(db: AsyncSession, follower_ids: list[str]) -> list[str]:
    """
    One token per follower: the viewer account's if it has one, else the
    artist profile's. Followers with neither are skipped; duplicates dropped.
    """
    if not follower_ids:
        return []

    user_tokens = dict(
        (
            await db.execute(
                select(AppUser.id, AppUser.fcm_token).where(AppUser.id.in_(follower_ids))
            )
        ).all()
    )
    artist_tokens = dict(
        (
            await db.execute(
                select(Artist.id, Artist.fcm_token).where(Artist.id.in_(follower_ids))
            )
        ).all()
    )

    tokens: list[str] = []
    seen: set[str] = set()
    for fid in follower_ids:
        token = user_tokens.get(fid) or artist_tokens.get(fid)
        if not token or token in seen:
            continue
        seen.add(token)
        tokens.append(token)
    return tokens


async def send_new_event_notification(
    db: AsyncSession,
    push: PushClient,
    *,
    event_id: str,
) -> NotificationResult:
    """
    Tell an artist's followers about a newly approved event.

    Called explicitly by the moderation flow, never on its own. Per-token
    failures only show up in the counts; PushDeliveryError is raised only
    when the request does not reach the push provider at all.
    """
    logger.info("[notifications] starting for event %s", event_id)

    event = await get_event(db, event_id)
    artist = await get_artist(db, event.artist_id)
    if not artist:
        raise NotFoundError(f"Artist {event.artist_id} not found")

    follower_ids = await list_follower_ids(db, artist_id=artist.id)
    if not follower_ids:
        logger.info("[notifications] artist %s has no followers", artist.id)
        return NotificationResult(success=True, message="Artist has no followers.")

    tokens = await resolve_device_tokens(db, follower_ids)
    if not tokens:
        logger.info("[notifications] none of %s followers have device tokens", len(follower_ids))
        return NotificationResult(success=True, message="No followers with notification permissions.")

    result = await push.send_multicast(
        title=f"New Event by {artist.name}!",
        body=f'"{event.title}" has been announced. Tap to book your tickets now!',
        tokens=tokens,
        link=f"/events/{event.id}",
    )

    if result.dry_run:
        message = f"Push is disabled; would have notified {len(tokens)} followers."
    else:
        message = f"Sent {result.success_count} of {len(tokens)} notifications."

    logger.info("[notifications] event %s: %s", event_id, message)
    return NotificationResult(
        success=True,
        message=message,
        token_count=len(tokens),
        success_count=result.success_count,
        failure_count=result.failure_count,
    )
