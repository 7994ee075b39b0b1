# backend/routes/admin_studio.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from db import get_db
from schemas.response import fail, ok
from schemas.studio import StudioIn
from services import studio_repo
from services.auth import require_api_key

router = APIRouter(
    prefix="/admin/studio",
    tags=["admin:studio"],
    dependencies=[Depends(require_api_key)],
)


@router.get("")
def get_studio(db: Session = Depends(get_db)):
    row = studio_repo.get_studio(db)
    return ok(studio_repo.studio_to_dict(row) if row is not None else None)


@router.post("")
def create_studio(payload: StudioIn, db: Session = Depends(get_db)):
    new_id = studio_repo.insert_studio(db, payload)
    if new_id is None:
        return JSONResponse(status_code=500, content=fail("Failed to insert studio"))
    return ok({"id": new_id})


@router.put("")
def update_studio(payload: StudioIn, db: Session = Depends(get_db)):
    if not studio_repo.update_studio(db, payload):
        return JSONResponse(status_code=500, content=fail("Failed to update studio"))
    return ok(True)
