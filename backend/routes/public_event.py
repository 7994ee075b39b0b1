# backend/routes/public_event.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from config.app_config import AppConfig
from db import get_db
from routes.common import get_clock, get_config, get_index_client, get_ranker
from schemas.response import ok
from services import companies_repo, locations_repo
from services.index_queries import event_list_query
from services.related import RelatedContentRanker
from services.repo_common import normalize_page
from util.time import require_utc_aware

router = APIRouter(prefix="/public/event", tags=["public:event"])


@router.get("")
async def list_events(
    skip: int = Query(0),
    take: int = Query(10),
    name: Optional[str] = Query(None),
    from_date: Optional[datetime] = Query(None, alias="fromDate"),
    category_id: Optional[List[str]] = Query(None, alias="categoryId"),
    cfg: AppConfig = Depends(get_config),
    client=Depends(get_index_client),
    clock=Depends(get_clock),
):
    skip, take = normalize_page(skip, take, cfg.list_max_take())
    if from_date is not None:
        from_date = require_utc_aware(from_date, "fromDate")
    body = event_list_query(
        skip=skip,
        take=take,
        name=name,
        from_date=from_date,
        category_ids=category_id or [],
        now=clock(),
    )
    return ok(await client.search(cfg.index_name("event"), body))


@router.get("/{slug}")
async def get_event(
    slug: str,
    cfg: AppConfig = Depends(get_config),
    client=Depends(get_index_client),
    db: Session = Depends(get_db),
):
    hit = await client.get_by_slug(cfg.index_name("event"), slug)
    if hit is None:
        return ok(None)

    # venue details come from the relational store, not the denormalized copy
    company_id = (hit.get("company") or {}).get("id")
    company = await run_in_threadpool(companies_repo.get_company, db, company_id) if company_id else None
    location = (
        await run_in_threadpool(locations_repo.get_location, db, hit["location"])
        if hit.get("location")
        else None
    )
    return ok(
        {
            **hit,
            "companyDetail": companies_repo.company_to_dict(company) if company else None,
            "locationDetail": locations_repo.location_to_dict(location) if location else None,
        }
    )


@router.get("/{slug}/related")
async def related_events(slug: str, ranker: RelatedContentRanker = Depends(get_ranker)):
    return ok(await ranker.related_events(slug))
