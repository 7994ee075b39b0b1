# backend/routes/admin_ad.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.app_config import AppConfig
from db import get_db
from routes.common import get_config, list_kwargs
from schemas.ad import AdIn
from schemas.common import ActiveToggle
from schemas.response import fail, ok
from services import ads_repo
from services.auth import require_api_key
from services.errors import ValidationError

router = APIRouter(
    prefix="/admin/ad",
    tags=["admin:ad"],
    dependencies=[Depends(require_api_key)],
)


@router.get("")
def list_ads(
    skip: int = Query(0),
    take: int = Query(10),
    name: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    cfg: AppConfig = Depends(get_config),
):
    return ok(ads_repo.list_ads(db, skip=skip, take=take, name=name, **list_kwargs(cfg)))


@router.get("/{ad_id}")
def get_ad(ad_id: str, db: Session = Depends(get_db)):
    row = ads_repo.get_ad(db, ad_id)
    return ok(ads_repo.ad_to_dict(row) if row is not None else None)


@router.post("")
def create_ad(payload: AdIn = Body(...), db: Session = Depends(get_db)):
    new_id = ads_repo.insert_ad(db, payload)
    if new_id is None:
        return JSONResponse(status_code=500, content=fail("Failed to insert ad"))
    return ok({"id": new_id})


@router.put("")
def update_ad(payload: AdIn = Body(...), db: Session = Depends(get_db)):
    if payload.id is None:
        raise ValidationError("`id` must be provided for update")
    if not ads_repo.update_ad(db, payload):
        return JSONResponse(status_code=500, content=fail("Failed to update ad"))
    return ok(True)


@router.patch("/{ad_id}")
def set_ad_active(ad_id: str, payload: ActiveToggle, db: Session = Depends(get_db)):
    if not ads_repo.set_ad_active(db, ad_id, payload.active):
        return JSONResponse(status_code=500, content=fail("Failed to update ad"))
    return ok(True)
