# backend/routes/public_category.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from config.app_config import AppConfig
from routes.common import get_config, get_index_client
from schemas.response import ok
from services.index_queries import category_list_query, children_query
from services.repo_common import normalize_page, require_positive_id

router = APIRouter(prefix="/public/category", tags=["public:category"])


@router.get("")
async def list_categories(
    skip: int = Query(0),
    take: int = Query(50),
    only_parents: bool = Query(False, alias="onlyParents"),
    cfg: AppConfig = Depends(get_config),
    client=Depends(get_index_client),
):
    skip, take = normalize_page(skip, take, cfg.list_max_take())
    body = category_list_query(skip=skip, take=take, only_parents=only_parents)
    return ok(await client.search(cfg.index_name("category"), body))


@router.get("/{category_id}/children")
async def list_children(
    category_id: str,
    skip: int = Query(0),
    take: int = Query(50),
    cfg: AppConfig = Depends(get_config),
    client=Depends(get_index_client),
):
    parent_id = require_positive_id(category_id, "id")
    skip, take = normalize_page(skip, take, cfg.list_max_take())
    body = children_query(str(parent_id), skip=skip, take=take)
    return ok(await client.search(cfg.index_name("category"), body))


@router.get("/{slug}")
async def get_category(slug: str, cfg: AppConfig = Depends(get_config), client=Depends(get_index_client)):
    return ok(await client.get_by_slug(cfg.index_name("category"), slug))
