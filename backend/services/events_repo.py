# services/events_repo.py
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from models.company import Company
from models.event import Event, EventRecurrence
from schemas.event import EventIn, RecurrenceIn
from schemas.i18n import i18n_columns, i18n_from_row
from services.errors import NotFoundError, ValidationError
from services.recurrence import dates_to_iso
from services.repo_common import (
    DEFAULT_MAX_TAKE,
    like_filter,
    normalize_page,
    require_positive_id,
    run_mutation,
    store_read,
)
from util.time import from_db_utc, to_iso_z, utcnow


ENTITY = "event"


def _load_options():
    return (
        selectinload(Event.category),
        selectinload(Event.company).selectinload(Company.address),
        selectinload(Event.company).selectinload(Company.location),
        selectinload(Event.recurrence),
    )


def get_event(db: Session, event_id: Any) -> Optional[Event]:
    eid = require_positive_id(event_id)
    with store_read(action="get", entity=ENTITY):
        q = (
            select(Event)
            .where(Event.id == eid)
            .options(*_load_options())
            .execution_options(populate_existing=True)
        )
        return db.execute(q).scalars().one_or_none()


def list_event_ids(db: Session, *, active_only: bool = False) -> list[int]:
    with store_read(action="list_ids", entity=ENTITY):
        q = select(Event.id).order_by(Event.id.asc())
        if active_only:
            q = q.where(Event.active.is_(True))
        return list(db.execute(q).scalars().all())


def list_events(
    db: Session,
    *,
    skip: int = 0,
    take: int = 10,
    name: Optional[str] = None,
    case_sensitive: bool = False,
    max_take: int = DEFAULT_MAX_TAKE,
) -> list[dict[str, Any]]:
    skip, take = normalize_page(skip, take, max_take)
    q = select(Event)
    if name and name.strip():
        term = name.strip()
        q = q.where(
            or_(
                like_filter(Event.title_pt, term, case_sensitive),
                like_filter(Event.title_en, term, case_sensitive),
                like_filter(Event.title_es, term, case_sensitive),
            )
        )
    q = q.order_by(Event.start_date.desc(), Event.id.desc()).offset(skip).limit(take)
    with store_read(action="list", entity=ENTITY):
        rows = db.execute(q).scalars().all()
    return [event_list_item(r) for r in rows]


def _recurrence_row(rec: RecurrenceIn, now) -> EventRecurrence:
    return EventRecurrence(
        rrule=rec.rrule,
        until=rec.until,
        exdates=dates_to_iso(rec.exdates),
        rdates=dates_to_iso(rec.rdates),
        created_at=now,
        updated_at=now,
    )


def _apply(row: Event, payload: EventIn, now) -> None:
    for k, v in {
        **i18n_columns("title", payload.title),
        **i18n_columns("slug", payload.slug),
        **i18n_columns("body", payload.body),
    }.items():
        setattr(row, k, v)
    row.category_id = payload.category_id
    row.company_id = payload.company_id
    row.hero_image = payload.hero_image
    row.thumbnail = payload.thumbnail
    row.start_date = payload.start_date
    row.end_date = payload.end_date
    row.pricing = payload.pricing
    row.external_ticket_link = (
        str(payload.external_ticket_link) if payload.external_ticket_link else None
    )
    row.facilities = list(payload.facilities)
    row.sponsored = payload.sponsored
    row.active = payload.active
    row.updated_at = now


def insert_event(db: Session, payload: EventIn) -> Optional[int]:
    """Event and its recurrence in one transaction. Returns the new id or None."""

    def _do(s: Session) -> int:
        now = utcnow()
        row = Event(created_at=now)
        _apply(row, payload, now)
        if payload.recurrence is not None:
            row.recurrence = _recurrence_row(payload.recurrence, now)
        s.add(row)
        s.flush()
        return row.id

    return run_mutation(db, _do, action="insert", entity=ENTITY)


def update_event(db: Session, payload: EventIn) -> bool:
    """
    Full replace. The recurrence row is replaced when present in the payload
    and deleted when absent.
    """
    if payload.id is None:
        raise ValidationError("`id` must be provided for update")
    event_id = payload.id

    def _do(s: Session) -> bool:
        row = s.get(Event, event_id, options=[selectinload(Event.recurrence)])
        if row is None:
            raise NotFoundError(ENTITY, event_id)
        now = utcnow()
        _apply(row, payload, now)
        if payload.recurrence is None:
            row.recurrence = None
        elif row.recurrence is None:
            row.recurrence = _recurrence_row(payload.recurrence, now)
        else:
            rec = row.recurrence
            rec.rrule = payload.recurrence.rrule
            rec.until = payload.recurrence.until
            rec.exdates = dates_to_iso(payload.recurrence.exdates)
            rec.rdates = dates_to_iso(payload.recurrence.rdates)
            rec.updated_at = now
        return True

    return bool(run_mutation(db, _do, action="update", entity=ENTITY, entity_id=event_id))


def set_event_active(db: Session, event_id: Any, active: bool) -> bool:
    eid = require_positive_id(event_id)

    def _do(s: Session) -> bool:
        row = s.get(Event, eid)
        if row is None:
            raise NotFoundError(ENTITY, eid)
        row.active = bool(active)
        row.updated_at = utcnow()
        return True

    return bool(run_mutation(db, _do, action="toggle_active", entity=ENTITY, entity_id=eid))


# mapping


def event_list_item(row: Event) -> dict[str, Any]:
    return {
        "id": row.id,
        "title": i18n_from_row(row, "title"),
        "slug": i18n_from_row(row, "slug"),
        "startDate": to_iso_z(from_db_utc(row.start_date)),
        "active": row.active,
    }


def event_to_dict(row: Event) -> dict[str, Any]:
    rec = row.recurrence
    return {
        "id": row.id,
        "title": i18n_from_row(row, "title"),
        "slug": i18n_from_row(row, "slug"),
        "body": i18n_from_row(row, "body"),
        "categoryId": row.category_id,
        "companyId": row.company_id,
        "heroImage": row.hero_image,
        "thumbnail": row.thumbnail,
        "startDate": to_iso_z(from_db_utc(row.start_date)),
        "endDate": to_iso_z(from_db_utc(row.end_date)),
        "pricing": row.pricing,
        "externalTicketLink": row.external_ticket_link,
        "facilities": list(row.facilities or []),
        "sponsored": row.sponsored,
        "active": row.active,
        "createdAt": to_iso_z(from_db_utc(row.created_at)),
        "updatedAt": to_iso_z(from_db_utc(row.updated_at)),
        "recurrence": (
            {
                "rrule": rec.rrule,
                "until": to_iso_z(from_db_utc(rec.until)) if rec.until else None,
                "exdates": list(rec.exdates or []),
                "rdates": list(rec.rdates or []),
            }
            if rec is not None
            else None
        ),
    }
