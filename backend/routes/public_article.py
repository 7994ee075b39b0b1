# backend/routes/public_article.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from config.app_config import AppConfig
from routes.common import get_config, get_index_client, get_ranker
from schemas.response import ok
from services.index_queries import article_list_query
from services.related import RelatedContentRanker
from services.repo_common import normalize_page

router = APIRouter(prefix="/public/article", tags=["public:article"])


@router.get("")
async def list_articles(
    skip: int = Query(0),
    take: int = Query(10),
    name: Optional[str] = Query(None),
    cfg: AppConfig = Depends(get_config),
    client=Depends(get_index_client),
):
    skip, take = normalize_page(skip, take, cfg.list_max_take())
    body = article_list_query(skip=skip, take=take, name=name)
    return ok(await client.search(cfg.index_name("article"), body))


@router.get("/{slug}")
async def get_article(slug: str, cfg: AppConfig = Depends(get_config), client=Depends(get_index_client)):
    return ok(await client.get_by_slug(cfg.index_name("article"), slug))


@router.get("/{slug}/related")
async def related_articles(slug: str, ranker: RelatedContentRanker = Depends(get_ranker)):
    return ok(await ranker.related_articles(slug))
