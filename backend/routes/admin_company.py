# backend/routes/admin_company.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.app_config import AppConfig
from db import get_db
from routes.common import get_config, get_synchronizer, list_kwargs, sync_event_after_commit
from schemas.common import ActiveToggle
from schemas.company import CompanyIn
from schemas.response import fail, ok
from services import companies_repo
from services.auth import require_api_key
from services.errors import ValidationError
from services.index_sync import IndexSynchronizer

router = APIRouter(
    prefix="/admin/company",
    tags=["admin:company"],
    dependencies=[Depends(require_api_key)],
)


async def _resync_events(
    db: Session, synchronizer: Optional[IndexSynchronizer], company_id: int
) -> bool:
    if synchronizer is None:
        return False
    # event documents embed company name, address and geo
    event_ids = await run_in_threadpool(companies_repo.list_event_ids_for_company, db, company_id)
    results = [await sync_event_after_commit(db, synchronizer, eid) for eid in event_ids]
    return all(results)


@router.get("")
def list_companies(
    skip: int = Query(0),
    take: int = Query(10),
    name: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    cfg: AppConfig = Depends(get_config),
):
    return ok(companies_repo.list_companies(db, skip=skip, take=take, name=name, **list_kwargs(cfg)))


@router.get("/{company_id}")
def get_company(company_id: str, db: Session = Depends(get_db)):
    row = companies_repo.get_company(db, company_id)
    return ok(companies_repo.company_to_dict(row) if row is not None else None)


@router.post("")
def create_company(payload: CompanyIn, db: Session = Depends(get_db)):
    new_id = companies_repo.insert_company(db, payload)
    if new_id is None:
        return JSONResponse(status_code=500, content=fail("Failed to insert company"))
    return ok({"id": new_id})


@router.put("")
async def update_company(
    payload: CompanyIn,
    db: Session = Depends(get_db),
    synchronizer: Optional[IndexSynchronizer] = Depends(get_synchronizer),
):
    if payload.id is None:
        raise ValidationError("`id` must be provided for update")
    if not await run_in_threadpool(companies_repo.update_company, db, payload):
        return JSONResponse(status_code=500, content=fail("Failed to update company"))
    return ok({"id": payload.id, "indexed": await _resync_events(db, synchronizer, payload.id)})


@router.patch("/{company_id}")
def set_company_active(company_id: str, payload: ActiveToggle, db: Session = Depends(get_db)):
    if not companies_repo.set_company_active(db, company_id, payload.active):
        return JSONResponse(status_code=500, content=fail("Failed to update company"))
    return ok(True)
