# backend/routes/admin_event.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.app_config import AppConfig
from db import get_db
from routes.common import get_config, get_synchronizer, list_kwargs, sync_event_after_commit, sync_failed
from schemas.common import ActiveToggle
from schemas.event import EventIn
from schemas.response import fail, ok
from services import events_repo
from services.auth import require_api_key
from services.errors import IndexSyncError, ValidationError
from services.index_sync import IndexSynchronizer

router = APIRouter(
    prefix="/admin/event",
    tags=["admin:event"],
    dependencies=[Depends(require_api_key)],
)


@router.get("")
def list_events(
    skip: int = Query(0),
    take: int = Query(10),
    name: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    cfg: AppConfig = Depends(get_config),
):
    return ok(events_repo.list_events(db, skip=skip, take=take, name=name, **list_kwargs(cfg)))


@router.get("/{event_id}")
def get_event(event_id: str, db: Session = Depends(get_db)):
    row = events_repo.get_event(db, event_id)
    return ok(events_repo.event_to_dict(row) if row is not None else None)


@router.post("")
async def create_event(
    payload: EventIn,
    db: Session = Depends(get_db),
    synchronizer: Optional[IndexSynchronizer] = Depends(get_synchronizer),
):
    new_id = await run_in_threadpool(events_repo.insert_event, db, payload)
    if new_id is None:
        return JSONResponse(status_code=500, content=fail("Failed to insert event"))
    indexed = await sync_event_after_commit(db, synchronizer, new_id)
    return ok({"id": new_id, "indexed": indexed})


@router.put("")
async def update_event(
    payload: EventIn,
    db: Session = Depends(get_db),
    synchronizer: Optional[IndexSynchronizer] = Depends(get_synchronizer),
):
    if payload.id is None:
        raise ValidationError("`id` must be provided for update")
    if not await run_in_threadpool(events_repo.update_event, db, payload):
        return JSONResponse(status_code=500, content=fail("Failed to update event"))
    indexed = await sync_event_after_commit(db, synchronizer, payload.id)
    return ok({"id": payload.id, "indexed": indexed})


@router.patch("/{event_id}")
async def set_event_active(
    event_id: str,
    payload: ActiveToggle,
    db: Session = Depends(get_db),
    synchronizer: Optional[IndexSynchronizer] = Depends(get_synchronizer),
):
    if not await run_in_threadpool(events_repo.set_event_active, db, event_id, payload.active):
        return JSONResponse(status_code=500, content=fail("Failed to update event"))
    indexed = await sync_event_after_commit(db, synchronizer, int(event_id))
    return ok({"id": int(event_id), "indexed": indexed})


@router.post("/{event_id}/reindex")
async def reindex_event(
    event_id: str,
    db: Session = Depends(get_db),
    synchronizer: Optional[IndexSynchronizer] = Depends(get_synchronizer),
):
    if synchronizer is None:
        return JSONResponse(status_code=503, content=fail("Search index is not configured"))
    row = await run_in_threadpool(events_repo.get_event, db, event_id)
    if row is None:
        return JSONResponse(status_code=404, content=fail("event not found"))
    try:
        report = await synchronizer.sync_event(row, row.category, row.company, row.company.location)
    except IndexSyncError as e:
        sync_failed("event", row.id, e)
        return JSONResponse(status_code=502, content=fail("Index sync failed"))
    return ok(
        {
            "sourceId": report.source_id,
            "upserted": report.upserted,
            "staleDeleted": report.stale_deleted,
            "occurrenceIds": list(report.occurrence_ids),
        }
    )
