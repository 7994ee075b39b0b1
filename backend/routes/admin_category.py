# backend/routes/admin_category.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.app_config import AppConfig
from db import get_db
from routes.common import get_config, get_synchronizer, list_kwargs, sync_failed
from schemas.category import CategoryIn
from schemas.common import ActiveToggle
from schemas.response import fail, ok
from services import categories_repo
from services.auth import require_api_key
from services.errors import IndexSyncError, ValidationError
from services.index_sync import IndexSynchronizer

router = APIRouter(
    prefix="/admin/category",
    tags=["admin:category"],
    dependencies=[Depends(require_api_key)],
)


async def _sync(db: Session, synchronizer: Optional[IndexSynchronizer], category_id: int) -> bool:
    if synchronizer is None:
        return False
    row = await run_in_threadpool(categories_repo.get_category, db, category_id)
    if row is None:
        return False
    try:
        await synchronizer.sync_category(row)
    except IndexSyncError as e:
        sync_failed("category", category_id, e)
        return False
    return True


@router.get("")
def list_categories(
    skip: int = Query(0),
    take: int = Query(10),
    name: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    cfg: AppConfig = Depends(get_config),
):
    return ok(
        categories_repo.list_categories(db, skip=skip, take=take, name=name, **list_kwargs(cfg))
    )


@router.get("/{category_id}/children")
def list_children(
    category_id: str,
    skip: int = Query(0),
    take: int = Query(50),
    db: Session = Depends(get_db),
    cfg: AppConfig = Depends(get_config),
):
    return ok(
        categories_repo.list_children(
            db, category_id, skip=skip, take=take, max_take=cfg.list_max_take()
        )
    )


@router.get("/{category_id}")
def get_category(category_id: str, db: Session = Depends(get_db)):
    row = categories_repo.get_category(db, category_id)
    return ok(categories_repo.category_to_dict(row) if row is not None else None)


@router.post("")
async def create_category(
    payload: CategoryIn,
    db: Session = Depends(get_db),
    synchronizer: Optional[IndexSynchronizer] = Depends(get_synchronizer),
):
    new_id = await run_in_threadpool(categories_repo.insert_category, db, payload)
    if new_id is None:
        return JSONResponse(status_code=500, content=fail("Failed to insert category"))
    return ok({"id": new_id, "indexed": await _sync(db, synchronizer, new_id)})


@router.put("")
async def update_category(
    payload: CategoryIn,
    db: Session = Depends(get_db),
    synchronizer: Optional[IndexSynchronizer] = Depends(get_synchronizer),
):
    if payload.id is None:
        raise ValidationError("`id` must be provided for update")
    if not await run_in_threadpool(categories_repo.update_category, db, payload):
        return JSONResponse(status_code=500, content=fail("Failed to update category"))
    return ok({"id": payload.id, "indexed": await _sync(db, synchronizer, payload.id)})


@router.patch("/{category_id}")
async def set_category_active(
    category_id: str,
    payload: ActiveToggle,
    db: Session = Depends(get_db),
    synchronizer: Optional[IndexSynchronizer] = Depends(get_synchronizer),
):
    if not await run_in_threadpool(
        categories_repo.set_category_active, db, category_id, payload.active
    ):
        return JSONResponse(status_code=500, content=fail("Failed to update category"))
    cid = int(category_id)
    return ok({"id": cid, "indexed": await _sync(db, synchronizer, cid)})
