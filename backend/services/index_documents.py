"""Relational rows -> denormalized search documents."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from models.article import Article
from models.category import Category
from models.company import Company
from models.event import Event
from models.location import Location
from schemas.i18n import i18n_from_row
from services.occurrence_id import generate_occurrence_id
from services.recurrence import OccurrenceWindow
from util.time import from_db_utc, to_iso_z


def _iso(dt) -> Optional[str]:
    dt = from_db_utc(dt)
    return to_iso_z(dt) if dt is not None else None


def _company_part(company: Company) -> dict[str, Any]:
    addr = company.address
    return {
        "id": str(company.id),
        "name": company.name,
        "slug": company.slug,
        "address": (
            {
                "street": addr.street,
                "number": addr.number,
                "complement": addr.complement,
                "district": addr.district,
                "city": addr.city,
                "state": addr.state,
                "postalCode": addr.postal_code,
                "country": addr.country,
                "countryCode": addr.country_code,
            }
            if addr is not None
            else None
        ),
    }


def event_documents(
    event: Event,
    category: Category,
    company: Company,
    location: Location,
    occurrences: Iterable[OccurrenceWindow],
) -> list[dict[str, Any]]:
    """One document per occurrence window, ordered as given."""
    source_id = str(event.id)
    geo = (
        {"lat": company.lat, "lon": company.lng}
        if company.lat is not None and company.lng is not None
        else None
    )

    shared: dict[str, Any] = {
        "id": source_id,
        "title": i18n_from_row(event, "title"),
        "slug": i18n_from_row(event, "slug"),
        "body": i18n_from_row(event, "body"),
        "category": str(category.id),
        "parentCategory": str(category.parent_id) if category.parent_id is not None else None,
        "categoryName": i18n_from_row(category, "name"),
        "categorySlug": i18n_from_row(category, "slug"),
        "company": _company_part(company),
        "location": str(location.id),
        "locationName": location.city,
        "locationSlug": location.city_slug,
        "heroImage": event.hero_image,
        "thumbnail": event.thumbnail,
        "pricing": event.pricing,
        "externalTicketLink": event.external_ticket_link,
        "facilities": list(event.facilities or []),
        "sponsored": bool(event.sponsored),
        "active": bool(event.active),
        "recurring": event.recurrence is not None,
        "created_at": _iso(event.created_at),
        "updated_at": _iso(event.updated_at),
    }
    if geo is not None:
        shared["geoLocation"] = geo

    docs = []
    for window in occurrences:
        doc = dict(shared)
        doc["esId"] = generate_occurrence_id(source_id, window.start)
        doc["startDate"] = to_iso_z(window.start)
        doc["endDate"] = to_iso_z(window.end)
        docs.append(doc)
    return docs


def article_document(article: Article) -> dict[str, Any]:
    return {
        "id": str(article.id),
        "title": i18n_from_row(article, "title"),
        "slug": i18n_from_row(article, "slug"),
        "body": i18n_from_row(article, "body"),
        "heroImage": article.hero_image,
        "thumbnail": article.thumbnail,
        "publicationDate": _iso(article.publication_date),
        "active": bool(article.active),
        "created_at": _iso(article.created_at),
        "updated_at": _iso(article.updated_at),
    }


def category_document(category: Category) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "id": str(category.id),
        "name": i18n_from_row(category, "name"),
        "slug": i18n_from_row(category, "slug"),
        "description": i18n_from_row(category, "description"),
        "active": bool(category.active),
        "created_at": _iso(category.created_at),
        "updated_at": _iso(category.updated_at),
    }
    # absent rather than null so `exists` filters treat it as a top-level category
    if category.parent_id is not None:
        doc["parent_id"] = str(category.parent_id)
    return doc
