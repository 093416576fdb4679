from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cloudstage.api.deps import get_services, require_admin
from cloudstage.core.container import ServiceContainer
from cloudstage.core.exceptions import NotFoundError, PushDeliveryError
from cloudstage.db.session import get_db
from cloudstage.models.event import ModerationStatus
from cloudstage.schemas.admin import BoostRequest, EventRead, ModerationResult, NotificationResult
from cloudstage.services.event_service import list_events_by_status, set_boost, set_moderation_status
from cloudstage.services.notification_service import send_new_event_notification

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/events", dependencies=[Depends(require_admin)])


@router.get("/pending", response_model=list[EventRead])
async def admin_list_pending_events(
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    return await list_events_by_status(db, status=ModerationStatus.pending, limit=limit)


@router.post("/{event_id}/approve", response_model=ModerationResult)
async def admin_approve_event(
    event_id: str,
    notify: bool = Query(True, description="Notify the artist's followers after approval"),
    db: AsyncSession = Depends(get_db),
    services: ServiceContainer = Depends(get_services),
):
    event = await set_moderation_status(db, event_id=event_id, status=ModerationStatus.approved)

    notification = None
    if notify:
        try:
            notification = await send_new_event_notification(db, services.push, event_id=event.id)
        except (PushDeliveryError, NotFoundError):
            # The approval stands; the admin can retry via /notify
            logger.exception("Follower notification failed for approved event %s", event.id)
            notification = NotificationResult(success=False, message="Failed to send notifications.")

    return ModerationResult(event=EventRead.model_validate(event), notification=notification)


@router.post("/{event_id}/reject", response_model=ModerationResult)
async def admin_reject_event(
    event_id: str,
    db: AsyncSession = Depends(get_db),
):
    event = await set_moderation_status(db, event_id=event_id, status=ModerationStatus.rejected)
    return ModerationResult(event=EventRead.model_validate(event))


@router.post("/{event_id}/boost", response_model=EventRead)
async def admin_boost_event(
    event_id: str,
    boost: BoostRequest,
    db: AsyncSession = Depends(get_db),
):
    return await set_boost(db, event_id=event_id, is_boosted=boost.is_boosted, amount=boost.amount)


@router.post("/{event_id}/notify", response_model=NotificationResult)
async def admin_notify_followers(
    event_id: str,
    db: AsyncSession = Depends(get_db),
    services: ServiceContainer = Depends(get_services),
):
    return await send_new_event_notification(db, services.push, event_id=event_id)
