# backend/routes/public_page.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from db import get_db
from models.page import PageKind
from schemas.response import ok
from services import pages_repo, studio_repo

# studio and institutional pages are not indexed; they are read from the store
router = APIRouter(prefix="/public", tags=["public:page"])


@router.get("/studio")
def get_studio(db: Session = Depends(get_db)):
    row = studio_repo.get_studio(db)
    return ok(studio_repo.studio_to_dict(row) if row is not None else None)


@router.get("/page/{kind}")
def get_page(kind: PageKind, db: Session = Depends(get_db)):
    row = pages_repo.get_page(db, kind)
    return ok(pages_repo.page_to_dict(row) if row is not None else None)
