# services/companies_repo.py
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from models.company import Address, Company
from models.event import Event
from schemas.company import AddressIn, CompanyIn
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


ENTITY = "company"

_ADDRESS_FIELDS = (
    "street",
    "number",
    "complement",
    "district",
    "city",
    "state",
    "state_full",
    "postal_code",
    "country",
    "country_code",
)


def get_company(db: Session, company_id: Any) -> Optional[Company]:
    cid = require_positive_id(company_id)
    with store_read(action="get", entity=ENTITY):
        q = (
            select(Company)
            .where(Company.id == cid)
            .options(selectinload(Company.address), selectinload(Company.location))
        )
        return db.execute(q).scalars().one_or_none()


def list_companies(
    db: Session,
    *,
    skip: int = 0,
    take: int = 10,
    name: Optional[str] = None,
    case_sensitive: bool = False,
    max_take: int = DEFAULT_MAX_TAKE,
) -> list[dict[str, Any]]:
    skip, take = normalize_page(skip, take, max_take)
    q = select(Company)
    if name and name.strip():
        q = q.where(like_filter(Company.name, name.strip(), case_sensitive))
    q = q.order_by(Company.name.asc(), Company.id.asc()).offset(skip).limit(take)
    with store_read(action="list", entity=ENTITY):
        rows = db.execute(q).scalars().all()
    return [company_list_item(r) for r in rows]


def list_event_ids_for_company(db: Session, company_id: int) -> list[int]:
    """Events whose index documents embed this company."""
    with store_read(action="list_event_ids", entity=ENTITY):
        q = select(Event.id).where(Event.company_id == company_id).order_by(Event.id)
        return list(db.execute(q).scalars().all())


def _apply_address(addr: Address, data: AddressIn, now) -> None:
    for f in _ADDRESS_FIELDS:
        setattr(addr, f, getattr(data, f))
    addr.country_code = data.country_code.upper()
    addr.updated_at = now


def _apply(row: Company, payload: CompanyIn, now) -> None:
    row.name = payload.name.strip()
    row.slug = payload.slug.strip().lower()
    row.location_id = payload.location_id
    row.lat = payload.geo.lat
    row.lng = payload.geo.lng
    row.active = payload.active
    row.updated_at = now


def insert_company(db: Session, payload: CompanyIn) -> Optional[int]:
    """Company and address in one transaction."""

    def _do(s: Session) -> int:
        now = utcnow()
        row = Company(created_at=now)
        _apply(row, payload, now)
        addr = Address(created_at=now)
        _apply_address(addr, payload.address, now)
        row.address = addr
        s.add(row)
        s.flush()
        return row.id

    return run_mutation(db, _do, action="insert", entity=ENTITY)


def update_company(db: Session, payload: CompanyIn) -> bool:
    if payload.id is None:
        raise ValidationError("`id` must be provided for update")
    company_id = payload.id

    def _do(s: Session) -> bool:
        row = s.get(Company, company_id, options=[selectinload(Company.address)])
        if row is None:
            raise NotFoundError(ENTITY, company_id)
        now = utcnow()
        _apply(row, payload, now)
        if row.address is None:
            row.address = Address(created_at=now)
        _apply_address(row.address, payload.address, now)
        return True

    return bool(run_mutation(db, _do, action="update", entity=ENTITY, entity_id=company_id))


def set_company_active(db: Session, company_id: Any, active: bool) -> bool:
    cid = require_positive_id(company_id)

    def _do(s: Session) -> bool:
        row = s.get(Company, cid)
        if row is None:
            raise NotFoundError(ENTITY, cid)
        row.active = bool(active)
        row.updated_at = utcnow()
        return True

    return bool(run_mutation(db, _do, action="toggle_active", entity=ENTITY, entity_id=cid))


def company_list_item(row: Company) -> dict[str, Any]:
    return {"id": row.id, "name": row.name, "slug": row.slug, "active": row.active}


def company_to_dict(row: Company) -> dict[str, Any]:
    addr = row.address
    return {
        **company_list_item(row),
        "locationId": row.location_id,
        "geo": {"lat": row.lat, "lng": row.lng},
        "address": (
            {
                "street": addr.street,
                "number": addr.number,
                "complement": addr.complement,
                "district": addr.district,
                "city": addr.city,
                "state": addr.state,
                "stateFull": addr.state_full,
                "postalCode": addr.postal_code,
                "country": addr.country,
                "countryCode": addr.country_code,
            }
            if addr is not None
            else None
        ),
        "createdAt": to_iso_z(from_db_utc(row.created_at)),
        "updatedAt": to_iso_z(from_db_utc(row.updated_at)),
    }
