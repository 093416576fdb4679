from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cloudstage.core.exceptions import NotFoundError
from cloudstage.models.reconciliation_entry import ReconciliationEntry
from cloudstage.schemas.fulfillment import FulfillmentOutcome, FulfillmentRequest
from cloudstage.services.fulfillment_service import classify, dispatch_fulfillment

logger = logging.getLogger(__name__)


def _safe_error_summary(err: str | None, max_len: int = 200) -> str | None:
    if not err:
        return None
    s = str(err).replace("\n", " ").replace("\r", " ").strip()
    if len(s) <= max_len:
        return s
    return s[:max_len] + "…"


async def record_failure(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    request: FulfillmentRequest,
    error: BaseException,
) -> str:
    """
    Persist a failed fulfillment for manual follow-up.
    Uses a fresh session: the one that failed may be unusable.
    """
    err = f"{type(error).__name__}: {error}"
    async with session_factory() as db:
        entry = ReconciliationEntry(
            provider=request.provider,
            payment_id=request.payment_id,
            order_ref=request.order_ref,
            dispatch_kind=classify(request.metadata).value,
            payload=request.model_dump(mode="json"),
            error_summary=_safe_error_summary(err),
            error_raw=err,  # internal/auditable; API will not expose this
            failed_at=datetime.utcnow(),
        )
        db.add(entry)
        await db.commit()
        return entry.id


async def list_entries(
    db: AsyncSession,
    *,
    include_resolved: bool = False,
    limit: int = 50,
) -> list[ReconciliationEntry]:
    """
    Latest entries first. Only the safe summary is meant to leave this service.
    """
    q = select(ReconciliationEntry)
    if not include_resolved:
        q = q.where(ReconciliationEntry.resolved_at.is_(None))
    q = q.order_by(desc(ReconciliationEntry.failed_at)).limit(limit)

    return list((await db.execute(q)).scalars().all())


async def _get_entry(db: AsyncSession, entry_id: str) -> ReconciliationEntry:
    entry = (
        await db.execute(
            select(ReconciliationEntry).where(ReconciliationEntry.id == entry_id)
        )
    ).scalar_one_or_none()
    if not entry:
        raise NotFoundError(f"Reconciliation entry {entry_id} not found")
    return entry


async def resolve_entry(db: AsyncSession, *, entry_id: str) -> ReconciliationEntry:
    entry = await _get_entry(db, entry_id)
    if entry.resolved_at is None:
        entry.resolved_at = datetime.utcnow()
        await db.commit()
    return entry


async def replay_entry(db: AsyncSession, *, entry_id: str) -> dict[str, Any]:
    """
    Re-run fulfillment from the stored payload.
    Safe to repeat: ticket creation and premium upgrade are both idempotent.
    """
    entry = await _get_entry(db, entry_id)
    if entry.resolved_at is not None:
        return {"ok": True, "already_resolved": True, "entry_id": entry.id}

    request = FulfillmentRequest.model_validate(entry.payload)
    outcome: FulfillmentOutcome = await dispatch_fulfillment(db, request)

    entry.resolved_at = datetime.utcnow()
    await db.commit()

    logger.info("Replayed reconciliation entry %s (payment %s): %s", entry.id, entry.payment_id, outcome.kind.value)
    return {
        "ok": True,
        "already_resolved": False,
        "entry_id": entry.id,
        "outcome": outcome.model_dump(mode="json"),
    }
