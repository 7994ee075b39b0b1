# services/categories_repo.py
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from models.category import Category
from schemas.category import CategoryIn
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


ENTITY = "category"


def get_category(db: Session, category_id: Any) -> Optional[Category]:
    cid = require_positive_id(category_id)
    with store_read(action="get", entity=ENTITY):
        return db.get(Category, cid)


def list_categories(
    db: Session,
    *,
    skip: int = 0,
    take: int = 10,
    name: Optional[str] = None,
    case_sensitive: bool = False,
    max_take: int = DEFAULT_MAX_TAKE,
) -> list[dict[str, Any]]:
    skip, take = normalize_page(skip, take, max_take)
    q = select(Category)
    if name and name.strip():
        term = name.strip()
        q = q.where(
            or_(
                like_filter(Category.name_pt, term, case_sensitive),
                like_filter(Category.name_en, term, case_sensitive),
                like_filter(Category.name_es, term, case_sensitive),
            )
        )
    q = q.order_by(Category.name_pt.asc(), Category.id.asc()).offset(skip).limit(take)
    with store_read(action="list", entity=ENTITY):
        rows = db.execute(q).scalars().all()
    return [category_list_item(r) for r in rows]


def list_children(
    db: Session,
    parent_id: Any,
    *,
    skip: int = 0,
    take: int = 50,
    max_take: int = DEFAULT_MAX_TAKE,
) -> list[dict[str, Any]]:
    pid = require_positive_id(parent_id, "parentId")
    skip, take = normalize_page(skip, take, max_take)
    q = (
        select(Category)
        .where(Category.parent_id == pid)
        .order_by(Category.name_pt.asc(), Category.id.asc())
        .offset(skip)
        .limit(take)
    )
    with store_read(action="list_children", entity=ENTITY):
        rows = db.execute(q).scalars().all()
    return [category_list_item(r) for r in rows]


def list_category_ids(db: Session) -> list[int]:
    with store_read(action="list_ids", entity=ENTITY):
        return list(db.execute(select(Category.id).order_by(Category.id)).scalars().all())


def _apply(row: Category, payload: CategoryIn, now) -> None:
    desc = payload.description
    cols = {
        **i18n_columns("name", payload.name),
        **i18n_columns("slug", payload.slug),
        **i18n_columns("description", None if desc is None or desc.is_empty() else desc),
    }
    for k, v in cols.items():
        setattr(row, k, v)
    row.parent_id = payload.parent_id
    row.active = payload.active
    row.updated_at = now


def insert_category(db: Session, payload: CategoryIn) -> Optional[int]:
    def _do(s: Session) -> int:
        now = utcnow()
        row = Category(created_at=now)
        _apply(row, payload, now)
        s.add(row)
        s.flush()
        return row.id

    return run_mutation(db, _do, action="insert", entity=ENTITY)


def update_category(db: Session, payload: CategoryIn) -> bool:
    if payload.id is None:
        raise ValidationError("`id` must be provided for update")
    if payload.parent_id is not None and payload.parent_id == payload.id:
        raise ValidationError("a category cannot be its own parent")
    category_id = payload.id

    def _do(s: Session) -> bool:
        row = s.get(Category, category_id)
        if row is None:
            raise NotFoundError(ENTITY, category_id)
        _apply(row, payload, utcnow())
        return True

    return bool(run_mutation(db, _do, action="update", entity=ENTITY, entity_id=category_id))


def set_category_active(db: Session, category_id: Any, active: bool) -> bool:
    cid = require_positive_id(category_id)

    def _do(s: Session) -> bool:
        row = s.get(Category, cid)
        if row is None:
            raise NotFoundError(ENTITY, cid)
        row.active = bool(active)
        row.updated_at = utcnow()
        return True

    return bool(run_mutation(db, _do, action="toggle_active", entity=ENTITY, entity_id=cid))


def category_list_item(row: Category) -> dict[str, Any]:
    return {
        "id": row.id,
        "name": i18n_from_row(row, "name"),
        "slug": i18n_from_row(row, "slug"),
        "parentId": row.parent_id,
        "active": row.active,
    }


def category_to_dict(row: Category) -> dict[str, Any]:
    return {
        **category_list_item(row),
        "description": i18n_from_row(row, "description"),
        "createdAt": to_iso_z(from_db_utc(row.created_at)),
        "updatedAt": to_iso_z(from_db_utc(row.updated_at)),
    }
