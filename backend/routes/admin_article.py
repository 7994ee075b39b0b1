# backend/routes/admin_article.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.app_config import AppConfig
from db import get_db
from routes.common import get_config, get_synchronizer, list_kwargs, sync_failed
from schemas.article import ArticleIn
from schemas.common import ActiveToggle
from schemas.response import fail, ok
from services import articles_repo
from services.auth import require_api_key
from services.errors import IndexSyncError, ValidationError
from services.index_sync import IndexSynchronizer

router = APIRouter(
    prefix="/admin/article",
    tags=["admin:article"],
    dependencies=[Depends(require_api_key)],
)


async def _sync(db: Session, synchronizer: Optional[IndexSynchronizer], article_id: int) -> bool:
    if synchronizer is None:
        return False
    row = await run_in_threadpool(articles_repo.get_article, db, article_id)
    if row is None:
        return False
    try:
        await synchronizer.sync_article(row)
    except IndexSyncError as e:
        sync_failed("article", article_id, e)
        return False
    return True


@router.get("")
def list_articles(
    skip: int = Query(0),
    take: int = Query(10),
    name: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    cfg: AppConfig = Depends(get_config),
):
    return ok(articles_repo.list_articles(db, skip=skip, take=take, name=name, **list_kwargs(cfg)))


@router.get("/{article_id}")
def get_article(article_id: str, db: Session = Depends(get_db)):
    row = articles_repo.get_article(db, article_id)
    return ok(articles_repo.article_to_dict(row) if row is not None else None)


@router.post("")
async def create_article(
    payload: ArticleIn,
    db: Session = Depends(get_db),
    synchronizer: Optional[IndexSynchronizer] = Depends(get_synchronizer),
):
    new_id = await run_in_threadpool(articles_repo.insert_article, db, payload)
    if new_id is None:
        return JSONResponse(status_code=500, content=fail("Failed to insert article"))
    return ok({"id": new_id, "indexed": await _sync(db, synchronizer, new_id)})


@router.put("")
async def update_article(
    payload: ArticleIn,
    db: Session = Depends(get_db),
    synchronizer: Optional[IndexSynchronizer] = Depends(get_synchronizer),
):
    if payload.id is None:
        raise ValidationError("`id` must be provided for update")
    if not await run_in_threadpool(articles_repo.update_article, db, payload):
        return JSONResponse(status_code=500, content=fail("Failed to update article"))
    return ok({"id": payload.id, "indexed": await _sync(db, synchronizer, payload.id)})


@router.patch("/{article_id}")
async def set_article_active(
    article_id: str,
    payload: ActiveToggle,
    db: Session = Depends(get_db),
    synchronizer: Optional[IndexSynchronizer] = Depends(get_synchronizer),
):
    if not await run_in_threadpool(articles_repo.set_article_active, db, article_id, payload.active):
        return JSONResponse(status_code=500, content=fail("Failed to update article"))
    aid = int(article_id)
    return ok({"id": aid, "indexed": await _sync(db, synchronizer, aid)})
