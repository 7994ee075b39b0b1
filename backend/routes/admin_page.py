# backend/routes/admin_page.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from db import get_db
from models.page import PageKind
from schemas.page import PageIn
from schemas.response import fail, ok
from services import pages_repo
from services.auth import require_api_key

router = APIRouter(
    prefix="/admin/page",
    tags=["admin:page"],
    dependencies=[Depends(require_api_key)],
)


@router.get("/{kind}")
def get_page(kind: PageKind, db: Session = Depends(get_db)):
    row = pages_repo.get_page(db, kind)
    return ok(pages_repo.page_to_dict(row) if row is not None else None)


@router.post("/{kind}")
def create_page(kind: PageKind, payload: PageIn, db: Session = Depends(get_db)):
    new_id = pages_repo.insert_page(db, kind, payload)
    if new_id is None:
        return JSONResponse(status_code=500, content=fail(f"Failed to insert {kind.value}"))
    return ok({"id": new_id})


@router.put("/{kind}")
def update_page(kind: PageKind, payload: PageIn, db: Session = Depends(get_db)):
    if not pages_repo.update_page(db, kind, payload):
        return JSONResponse(status_code=500, content=fail(f"Failed to update {kind.value}"))
    return ok(True)
