from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from config.app_config import AppConfig
from db import Base, create_db_engine, make_session_factory
from init_db import init_db
from models.category import Category
from models.company import Address, Company
from models.location import Location
from services.errors import IndexSyncError


TEST_CONFIG = {
    "database": {"url": "sqlite://"},
    "search": {
        "domain": "search-test.us-east-1.es.amazonaws.com",
        "region": "us-east-1",
        "timeout_seconds": 5,
        "indexes": {"event": "events", "article": "articles", "category": "categories"},
    },
    "recurrence": {"horizon_months": 12, "max_occurrences": 500},
    "related": {"target_count": 4, "decay_scale": "14d", "decay": 0.5, "relevance_grace_minutes": 60},
    "store": {"list_max_take": 500, "like_case_sensitive": False},
}


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def i18n(base: str) -> dict[str, str]:
    return {"pt": f"{base} pt", "en": f"{base} en", "es": f"{base} es"}


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(raw={k: dict(v) for k, v in TEST_CONFIG.items()})


@pytest.fixture
def engine():
    eng = create_db_engine("sqlite://")
    init_db(eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(bind=eng)
        eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def venue(db):
    """A category, a location and a company with an address, committed."""
    now = utc(2024, 1, 1)
    loc = Location(
        city="Lisboa",
        city_slug="lisboa",
        state="Lisboa",
        country="Portugal",
        description="",
        created_at=now,
        updated_at=now,
    )
    cat = Category(
        name_pt="Teatro",
        name_en="Theatre",
        name_es="Teatro",
        slug_pt="teatro",
        slug_en="theatre",
        slug_es="teatro-es",
        created_at=now,
        updated_at=now,
    )
    db.add_all([loc, cat])
    db.flush()
    company = Company(
        name="Teatro Nacional",
        slug="teatro-nacional",
        location_id=loc.id,
        lat=38.71,
        lng=-9.14,
        created_at=now,
        updated_at=now,
    )
    company.address = Address(
        street="Praça Dom Pedro IV",
        city="Lisboa",
        state="LX",
        country="Portugal",
        country_code="PT",
        created_at=now,
        updated_at=now,
    )
    db.add(company)
    db.commit()
    return {"category": cat, "location": loc, "company": company}


def event_payload(venue: dict, **overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "title": i18n("Concerto"),
        "slug": i18n("concerto"),
        "body": i18n("Descricao"),
        "categoryId": venue["category"].id,
        "companyId": venue["company"].id,
        "heroImage": "https://cdn.example.org/hero.jpg",
        "thumbnail": "https://cdn.example.org/thumb.jpg",
        "startDate": "2024-01-03T19:00:00Z",
        "endDate": "2024-01-03T21:00:00Z",
        "pricing": 15.0,
        "facilities": ["wheelchair"],
    }
    body.update(overrides)
    return body


class FakeIndexClient:
    """In-memory stand-in for SearchIndexClient; records every call."""

    def __init__(self) -> None:
        self.docs: dict[str, dict[str, dict[str, Any]]] = {}
        self.calls: list[tuple[str, str, Any]] = []
        self.search_results: list[list[dict[str, Any]]] = []
        self.slug_hits: dict[str, dict[str, Any]] = {}
        self.fail_upserts = False

    async def upsert_document(self, index: str, document_id: str, document: dict) -> bool:
        self.calls.append(("upsert", index, document_id))
        if self.fail_upserts:
            raise IndexSyncError("upsert failed", status=503, body="unavailable")
        self.docs.setdefault(index, {})[document_id] = document
        return True

    async def bulk_upsert(self, index: str, documents: list[dict]) -> int:
        self.calls.append(("bulk_upsert", index, [d["esId"] for d in documents]))
        if self.fail_upserts:
            raise IndexSyncError("bulk upsert failed", status=503, body="unavailable")
        for doc in documents:
            self.docs.setdefault(index, {})[doc["esId"]] = doc
        return len(documents)

    async def delete_by_query(self, index: str, body: dict) -> int:
        self.calls.append(("delete_by_query", index, body))
        docs = self.docs.get(index, {})
        q = body["query"]
        b = q.get("bool", {"filter": [q]})
        source_id = b["filter"][0]["term"]["id"]
        keep: set[str] = set()
        for clause in b.get("must_not", []):
            keep.update(clause["terms"]["esId"])
        doomed = [k for k, d in docs.items() if d.get("id") == source_id and k not in keep]
        for k in doomed:
            del docs[k]
        return len(doomed)

    async def search(self, index: str, body: dict) -> list[dict[str, Any]]:
        self.calls.append(("search", index, body))
        return self.search_results.pop(0) if self.search_results else []

    async def get_by_slug(self, index: str, slug: str) -> Optional[dict[str, Any]]:
        self.calls.append(("get_by_slug", index, slug))
        return self.slug_hits.get(slug)


@pytest.fixture
def fake_index() -> FakeIndexClient:
    return FakeIndexClient()
