"""Explicit index mappings, applied by `scripts/reindex.py --create-indexes`."""

from __future__ import annotations

from typing import Any

from schemas.i18n import LOCALES


KEYWORD = {"type": "keyword"}
DATE = {"type": "date"}
BOOLEAN = {"type": "boolean"}


def _i18n_text() -> dict[str, Any]:
    text = {"type": "text", "fields": {"keyword": {"type": "keyword", "ignore_above": 512}}}
    return {"properties": {loc: text for loc in LOCALES}}


EVENT_MAPPING: dict[str, Any] = {
    "mappings": {
        "properties": {
            "id": KEYWORD,
            "esId": KEYWORD,
            "title": _i18n_text(),
            "slug": _i18n_text(),
            "body": _i18n_text(),
            "category": KEYWORD,
            "parentCategory": KEYWORD,
            "categoryName": _i18n_text(),
            "categorySlug": _i18n_text(),
            "location": KEYWORD,
            "locationName": {"type": "text", "fields": {"keyword": KEYWORD}},
            "locationSlug": KEYWORD,
            "geoLocation": {"type": "geo_point"},
            "startDate": DATE,
            "endDate": DATE,
            "pricing": {"type": "scaled_float", "scaling_factor": 100},
            "sponsored": BOOLEAN,
            "active": BOOLEAN,
            "recurring": BOOLEAN,
            "created_at": DATE,
            "updated_at": DATE,
        }
    }
}

ARTICLE_MAPPING: dict[str, Any] = {
    "mappings": {
        "properties": {
            "id": KEYWORD,
            "title": _i18n_text(),
            "slug": _i18n_text(),
            "body": _i18n_text(),
            "publicationDate": DATE,
            "active": BOOLEAN,
            "created_at": DATE,
            "updated_at": DATE,
        }
    }
}

CATEGORY_MAPPING: dict[str, Any] = {
    "mappings": {
        "properties": {
            "id": KEYWORD,
            "parent_id": KEYWORD,
            "name": _i18n_text(),
            "slug": _i18n_text(),
            "description": _i18n_text(),
            "active": BOOLEAN,
            "created_at": DATE,
            "updated_at": DATE,
        }
    }
}

MAPPINGS = {
    "event": EVENT_MAPPING,
    "article": ARTICLE_MAPPING,
    "category": CATEGORY_MAPPING,
}
