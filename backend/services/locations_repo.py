# services/locations_repo.py
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from models.location import Location, LocationDistrict
from schemas.location import LocationIn
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


ENTITY = "location"


def get_location(db: Session, location_id: Any) -> Optional[Location]:
    lid = require_positive_id(location_id)
    with store_read(action="get", entity=ENTITY):
        q = select(Location).where(Location.id == lid).options(selectinload(Location.districts))
        return db.execute(q).scalars().one_or_none()


def list_locations(
    db: Session,
    *,
    skip: int = 0,
    take: int = 10,
    name: Optional[str] = None,
    case_sensitive: bool = False,
    max_take: int = DEFAULT_MAX_TAKE,
) -> list[dict[str, Any]]:
    skip, take = normalize_page(skip, take, max_take)
    q = select(Location)
    if name and name.strip():
        q = q.where(like_filter(Location.city, name.strip(), case_sensitive))
    q = q.order_by(Location.city.asc(), Location.id.asc()).offset(skip).limit(take)
    with store_read(action="list", entity=ENTITY):
        rows = db.execute(q).scalars().all()
    return [location_list_item(r) for r in rows]


def _districts(payload: LocationIn, now) -> list[LocationDistrict]:
    return [
        LocationDistrict(
            district=d.district.strip(),
            slug=d.slug.strip().lower(),
            created_at=now,
            updated_at=now,
        )
        for d in payload.districts
    ]


def _apply(row: Location, payload: LocationIn, now) -> None:
    row.city = payload.city.strip()
    row.city_slug = payload.city_slug.strip().lower()
    row.state = payload.state
    row.country = payload.country
    row.description = payload.description
    row.active = payload.active
    row.updated_at = now


def insert_location(db: Session, payload: LocationIn) -> Optional[int]:
    """Location and its districts in one transaction."""

    def _do(s: Session) -> int:
        now = utcnow()
        row = Location(created_at=now)
        _apply(row, payload, now)
        row.districts = _districts(payload, now)
        s.add(row)
        s.flush()
        return row.id

    return run_mutation(db, _do, action="insert", entity=ENTITY)


def update_location(db: Session, payload: LocationIn) -> bool:
    """Districts are replaced wholesale."""
    if payload.id is None:
        raise ValidationError("`id` must be provided for update")
    location_id = payload.id

    def _do(s: Session) -> bool:
        row = s.get(Location, location_id, options=[selectinload(Location.districts)])
        if row is None:
            raise NotFoundError(ENTITY, location_id)
        now = utcnow()
        _apply(row, payload, now)
        row.districts = _districts(payload, now)
        return True

    return bool(run_mutation(db, _do, action="update", entity=ENTITY, entity_id=location_id))


def set_location_active(db: Session, location_id: Any, active: bool) -> bool:
    lid = require_positive_id(location_id)

    def _do(s: Session) -> bool:
        row = s.get(Location, lid)
        if row is None:
            raise NotFoundError(ENTITY, lid)
        row.active = bool(active)
        row.updated_at = utcnow()
        return True

    return bool(run_mutation(db, _do, action="toggle_active", entity=ENTITY, entity_id=lid))


def location_list_item(row: Location) -> dict[str, Any]:
    return {"id": row.id, "city": row.city, "citySlug": row.city_slug, "active": row.active}


def location_to_dict(row: Location) -> dict[str, Any]:
    return {
        **location_list_item(row),
        "state": row.state,
        "country": row.country,
        "description": row.description,
        "districts": [{"district": d.district, "slug": d.slug} for d in row.districts],
        "createdAt": to_iso_z(from_db_utc(row.created_at)),
        "updatedAt": to_iso_z(from_db_utc(row.updated_at)),
    }
