# backend/routes/admin_location.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.app_config import AppConfig
from db import get_db
from routes.common import get_config, list_kwargs
from schemas.common import ActiveToggle
from schemas.location import LocationIn
from schemas.response import fail, ok
from services import locations_repo
from services.auth import require_api_key
from services.errors import ValidationError

router = APIRouter(
    prefix="/admin/location",
    tags=["admin:location"],
    dependencies=[Depends(require_api_key)],
)


@router.get("")
def list_locations(
    skip: int = Query(0),
    take: int = Query(10),
    name: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    cfg: AppConfig = Depends(get_config),
):
    return ok(locations_repo.list_locations(db, skip=skip, take=take, name=name, **list_kwargs(cfg)))


@router.get("/{location_id}")
def get_location(location_id: str, db: Session = Depends(get_db)):
    row = locations_repo.get_location(db, location_id)
    return ok(locations_repo.location_to_dict(row) if row is not None else None)


@router.post("")
def create_location(payload: LocationIn, db: Session = Depends(get_db)):
    new_id = locations_repo.insert_location(db, payload)
    if new_id is None:
        return JSONResponse(status_code=500, content=fail("Failed to insert location"))
    return ok({"id": new_id})


@router.put("")
def update_location(payload: LocationIn, db: Session = Depends(get_db)):
    if payload.id is None:
        raise ValidationError("`id` must be provided for update")
    if not locations_repo.update_location(db, payload):
        return JSONResponse(status_code=500, content=fail("Failed to update location"))
    return ok(True)


@router.patch("/{location_id}")
def set_location_active(location_id: str, payload: ActiveToggle, db: Session = Depends(get_db)):
    if not locations_repo.set_location_active(db, location_id, payload.active):
        return JSONResponse(status_code=500, content=fail("Failed to update location"))
    return ok(True)
