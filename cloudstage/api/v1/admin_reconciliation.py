from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cloudstage.api.deps import require_admin
from cloudstage.db.session import get_db
from cloudstage.schemas.admin import ReconciliationEntryRead
from cloudstage.services.reconciliation_service import (
    list_entries,
    replay_entry,
    resolve_entry,
)

router = APIRouter(prefix="/admin/reconciliation", dependencies=[Depends(require_admin)])


@router.get("")
async def admin_list_reconciliation(
    limit: int = Query(50, ge=1, le=200),
    include_resolved: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    entries = await list_entries(db, include_resolved=include_resolved, limit=limit)
    items = [ReconciliationEntryRead.model_validate(e) for e in entries]
    return {"items": items, "count": len(items)}


@router.post("/{entry_id}/resolve", response_model=ReconciliationEntryRead)
async def admin_resolve_reconciliation(
    entry_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await resolve_entry(db, entry_id=entry_id)


@router.post("/{entry_id}/replay")
async def admin_replay_reconciliation(
    entry_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await replay_entry(db, entry_id=entry_id)
