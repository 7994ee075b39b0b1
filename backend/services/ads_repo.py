# services/ads_repo.py
from __future__ import annotations

from typing import Any, Optional, assert_never

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from models.ad import Ad, AdCategoryDetail, AdMenuDetail, AdMenuType, AdType
from schemas.ad import AdCategoryIn, AdIn, AdMenuIn
from schemas.i18n import i18n_columns, i18n_from_row
from services.errors import NotFoundError, ValidationError
from services.repo_common import (
    DEFAULT_MAX_TAKE,
    like_filter,
    normalize_page,
    require_positive_id,
    run_mutation,
    store_read,
)
from util.time import from_db_utc, to_iso_z, utcnow


ENTITY = "ad"


def _load_options():
    return (selectinload(Ad.category_detail), selectinload(Ad.menu_detail))


def get_ad(db: Session, ad_id: Any) -> Optional[Ad]:
    aid = require_positive_id(ad_id)
    with store_read(action="get", entity=ENTITY):
        q = select(Ad).where(Ad.id == aid).options(*_load_options())
        return db.execute(q).scalars().one_or_none()


def list_ads(
    db: Session,
    *,
    skip: int = 0,
    take: int = 10,
    name: Optional[str] = None,
    case_sensitive: bool = False,
    max_take: int = DEFAULT_MAX_TAKE,
) -> list[dict[str, Any]]:
    skip, take = normalize_page(skip, take, max_take)
    q = select(Ad).options(*_load_options())
    if name and name.strip():
        term = name.strip()
        q = q.where(
            or_(
                like_filter(Ad.title_pt, term, case_sensitive),
                like_filter(Ad.title_en, term, case_sensitive),
                like_filter(Ad.title_es, term, case_sensitive),
            )
        )
    q = q.order_by(Ad.start_date.desc(), Ad.id.desc()).offset(skip).limit(take)
    with store_read(action="list", entity=ENTITY):
        rows = db.execute(q).scalars().all()
    return [ad_list_item(r) for r in rows]


def _apply(row: Ad, payload: AdCategoryIn | AdMenuIn, now) -> None:
    for k, v in i18n_columns("title", payload.title).items():
        setattr(row, k, v)
    row.ad_type = int(payload.type)
    row.url = payload.url.strip()
    row.start_date = payload.start_date
    row.end_date = payload.end_date
    row.thumbnail = payload.thumbnail
    row.pricing = payload.pricing
    row.active = payload.active
    row.updated_at = now


def _write_detail(row: Ad, payload: AdCategoryIn | AdMenuIn, now) -> None:
    """Exactly one detail row, matching the ad type. The other one is removed."""
    match payload:
        case AdCategoryIn():
            row.menu_detail = None
            if row.category_detail is None:
                row.category_detail = AdCategoryDetail(created_at=now)
            row.category_detail.category_id = payload.category_id
            row.category_detail.updated_at = now
        case AdMenuIn():
            row.category_detail = None
            if row.menu_detail is None:
                row.menu_detail = AdMenuDetail(created_at=now)
            row.menu_detail.menu_type = int(payload.menu_type)
            row.menu_detail.updated_at = now
        case _:
            assert_never(payload)


def insert_ad(db: Session, payload: AdIn) -> Optional[int]:
    """Ad and its type-specific detail in one transaction."""

    def _do(s: Session) -> int:
        now = utcnow()
        row = Ad(created_at=now)
        _apply(row, payload, now)
        _write_detail(row, payload, now)
        s.add(row)
        s.flush()
        return row.id

    return run_mutation(db, _do, action="insert", entity=ENTITY)


def update_ad(db: Session, payload: AdIn) -> bool:
    if payload.id is None:
        raise ValidationError("`id` must be provided for update")
    ad_id = payload.id

    def _do(s: Session) -> bool:
        row = s.get(Ad, ad_id, options=list(_load_options()))
        if row is None:
            raise NotFoundError(ENTITY, ad_id)
        now = utcnow()
        _apply(row, payload, now)
        _write_detail(row, payload, now)
        return True

    return bool(run_mutation(db, _do, action="update", entity=ENTITY, entity_id=ad_id))


def set_ad_active(db: Session, ad_id: Any, active: bool) -> bool:
    aid = require_positive_id(ad_id)

    def _do(s: Session) -> bool:
        row = s.get(Ad, aid)
        if row is None:
            raise NotFoundError(ENTITY, aid)
        row.active = bool(active)
        row.updated_at = utcnow()
        return True

    return bool(run_mutation(db, _do, action="toggle_active", entity=ENTITY, entity_id=aid))


def _detail_dict(row: Ad) -> dict[str, Any]:
    ad_type = AdType(row.ad_type)
    match ad_type:
        case AdType.CATEGORY:
            d = row.category_detail
            return {"categoryId": d.category_id if d is not None else None}
        case AdType.MENU:
            d = row.menu_detail
            return {"menuType": AdMenuType(d.menu_type).value if d is not None else None}
        case _:
            assert_never(ad_type)


def ad_list_item(row: Ad) -> dict[str, Any]:
    return {
        "id": row.id,
        "type": row.ad_type,
        "title": i18n_from_row(row, "title"),
        "startDate": to_iso_z(from_db_utc(row.start_date)),
        "endDate": to_iso_z(from_db_utc(row.end_date)),
        "active": row.active,
    }


def ad_to_dict(row: Ad) -> dict[str, Any]:
    return {
        **ad_list_item(row),
        **_detail_dict(row),
        "url": row.url,
        "thumbnail": row.thumbnail,
        "pricing": row.pricing,
        "createdAt": to_iso_z(from_db_utc(row.created_at)),
        "updatedAt": to_iso_z(from_db_utc(row.updated_at)),
    }
