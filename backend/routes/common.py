# backend/routes/common.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Optional

from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from config.app_config import AppConfig
from services import events_repo
from services.errors import ConfigError, IndexSyncError
from services.index_sync import IndexSynchronizer
from services.related import RelatedContentRanker
from util.jsonlog import get_logger, log_event


logger = get_logger("admin")


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_clock(request: Request) -> Callable[[], datetime]:
    return request.app.state.clock


def get_index_client(request: Request):
    client = request.app.state.index_client
    if client is None:
        raise ConfigError("search index is not configured")
    return client


def get_synchronizer(request: Request) -> Optional[IndexSynchronizer]:
    # admin writes still commit without an index; they report indexed=false
    client = request.app.state.index_client
    if client is None:
        return None
    return IndexSynchronizer(client, request.app.state.config, clock=request.app.state.clock)


def get_ranker(request: Request) -> RelatedContentRanker:
    return RelatedContentRanker(
        get_index_client(request), request.app.state.config, clock=request.app.state.clock
    )


def list_kwargs(cfg: AppConfig) -> dict[str, Any]:
    return {"case_sensitive": cfg.like_case_sensitive(), "max_take": cfg.list_max_take()}


def sync_failed(kind: str, entity_id: Any, err: Exception) -> None:
    log_event(
        logger,
        level="ERROR",
        event="index_sync_failed",
        msg=f"{kind} committed but index sync failed",
        kind=kind,
        entity_id=entity_id,
        error=str(err),
    )


async def sync_event_after_commit(
    db: Session, synchronizer: Optional[IndexSynchronizer], event_id: int
) -> bool:
    """
    Runs after the relational commit. Returns whether the index is in sync;
    a failure is logged and never undoes the commit.
    """
    if synchronizer is None:
        return False
    row = await run_in_threadpool(events_repo.get_event, db, event_id)
    if row is None:
        return False
    try:
        await synchronizer.sync_event(row, row.category, row.company, row.company.location)
    except IndexSyncError as e:
        sync_failed("event", event_id, e)
        return False
    return True
