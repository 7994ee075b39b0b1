"""
Query bodies for the search index. Pure functions, no I/O.

Identifier and facet fields (id, esId, category, parentCategory, location,
parent_id) are keyword fields, see services.index_mappings. Localized text
fields are matched on their `.keyword` sub-field.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional

from schemas.i18n import LOCALES
from util.time import to_iso_z


def escape_wildcard(term: str) -> str:
    """Lowercases and escapes the wildcard metacharacters (`*`, `?`) and the escape char."""
    t = term.strip().lower()
    return t.replace("\\", "\\\\").replace("*", "\\*").replace("?", "\\?")


def wildcard_clause(field: str, term: str) -> dict[str, Any]:
    return {
        "wildcard": {
            field: {"value": f"*{escape_wildcard(term)}*", "case_insensitive": True}
        }
    }


def i18n_wildcard(prefix: str, term: str) -> dict[str, Any]:
    """Substring match on any locale of a localized field."""
    return {
        "bool": {
            "should": [wildcard_clause(f"{prefix}.{loc}.keyword", term) for loc in LOCALES],
            "minimum_should_match": 1,
        }
    }


def _bool(
    *,
    must: Optional[list] = None,
    filter: Optional[list] = None,
    must_not: Optional[list] = None,
) -> dict[str, Any]:
    b: dict[str, Any] = {}
    if must:
        b["must"] = must
    if filter:
        b["filter"] = filter
    if must_not:
        b["must_not"] = must_not
    return {"bool": b} if b else {"match_all": {}}


def _collapse_on_source_id() -> dict[str, Any]:
    # one hit per source event: its nearest indexed occurrence
    return {
        "field": "id",
        "inner_hits": {
            "name": "next_occurrence",
            "size": 1,
            "sort": [{"startDate": {"order": "asc"}}],
            "_source": False,
        },
    }


def slug_query(slug: str) -> dict[str, Any]:
    normalized = slug.strip().lower()
    return {
        "size": 1,
        "track_total_hits": False,
        "query": {
            "bool": {
                "should": [{"term": {f"slug.{loc}.keyword": normalized}} for loc in LOCALES],
                "minimum_should_match": 1,
            }
        },
        "sort": [{"updated_at": {"order": "desc", "unmapped_type": "date"}}],
    }


def event_list_query(
    *,
    skip: int,
    take: int,
    name: Optional[str],
    from_date: Optional[datetime],
    category_ids: Iterable[str] = (),
    now: datetime,
) -> dict[str, Any]:
    must: list = []
    filters: list = []

    if name and name.strip():
        must.append(i18n_wildcard("title", name))

    ids = [str(c) for c in category_ids if str(c).strip()]
    if ids:
        filters.append(
            {
                "bool": {
                    "should": [
                        {"terms": {"category": ids}},
                        {"terms": {"parentCategory": ids}},
                    ],
                    "minimum_should_match": 1,
                }
            }
        )

    filters.append({"range": {"startDate": {"gte": to_iso_z(from_date or now)}}})
    filters.append({"term": {"active": True}})

    return {
        "from": skip,
        "size": take,
        "track_total_hits": False,
        "query": _bool(must=must, filter=filters),
        "sort": [
            {"startDate": {"order": "asc", "unmapped_type": "date"}},
            {"sponsored": {"order": "desc", "unmapped_type": "boolean"}},
            {"updated_at": {"order": "desc", "unmapped_type": "date"}},
        ],
        "collapse": _collapse_on_source_id(),
    }


def article_list_query(*, skip: int, take: int, name: Optional[str]) -> dict[str, Any]:
    must = [i18n_wildcard("title", name)] if name and name.strip() else []
    return {
        "from": skip,
        "size": take,
        "track_total_hits": False,
        "query": _bool(must=must, filter=[{"term": {"active": True}}]),
        "sort": [
            {"publicationDate": {"order": "desc", "unmapped_type": "date"}},
            {"updated_at": {"order": "desc", "unmapped_type": "date"}},
        ],
    }


def category_list_query(*, skip: int, take: int, only_parents: bool = False) -> dict[str, Any]:
    must_not = [{"exists": {"field": "parent_id"}}] if only_parents else []
    return {
        "from": skip,
        "size": take,
        "track_total_hits": False,
        "query": _bool(filter=[{"term": {"active": True}}], must_not=must_not),
        "sort": [{"name.pt.keyword": {"order": "asc", "unmapped_type": "keyword"}}],
    }


def children_query(parent_id: str, *, skip: int, take: int) -> dict[str, Any]:
    return {
        "from": skip,
        "size": take,
        "track_total_hits": False,
        "query": _bool(
            filter=[{"term": {"parent_id": str(parent_id)}}, {"term": {"active": True}}]
        ),
        "sort": [{"name.pt.keyword": {"order": "asc", "unmapped_type": "keyword"}}],
    }


def occurrences_query(source_id: str) -> dict[str, Any]:
    return {"query": {"term": {"id": str(source_id)}}}


def stale_occurrences_query(source_id: str, keep_ids: Iterable[str]) -> dict[str, Any]:
    """Every occurrence document of source_id whose esId is not in keep_ids."""
    keep = sorted({str(k) for k in keep_ids})
    must_not = [{"terms": {"esId": keep}}] if keep else []
    return {"query": _bool(filter=[{"term": {"id": str(source_id)}}], must_not=must_not)}


# related content


def related_events_exact_query(
    base: dict[str, Any], *, cutoff: datetime, size: int
) -> dict[str, Any]:
    return {
        "size": size,
        "track_total_hits": False,
        "query": _bool(
            filter=[
                {"term": {"category": str(base["category"])}},
                {"term": {"location": str(base["location"])}},
                {"term": {"active": True}},
                {"range": {"startDate": {"gte": to_iso_z(cutoff)}}},
            ],
            must_not=[{"term": {"id": str(base["id"])}}],
        ),
        "sort": [
            {"sponsored": {"order": "desc", "unmapped_type": "boolean"}},
            {"startDate": {"order": "asc", "unmapped_type": "date"}},
            {"updated_at": {"order": "desc", "unmapped_type": "date"}},
        ],
        "collapse": _collapse_on_source_id(),
    }


def _gauss(field: str, origin: str, scale: str, decay: float) -> dict[str, Any]:
    return {"gauss": {field: {"origin": origin, "scale": scale, "offset": "0d", "decay": decay}}}


def related_events_decay_query(
    base: dict[str, Any],
    *,
    exclude_ids: Iterable[str],
    cutoff: datetime,
    size: int,
    scale: str,
    decay: float,
) -> dict[str, Any]:
    excluded = sorted({str(base["id"]), *(str(i) for i in exclude_ids)})
    return {
        "size": size,
        "track_total_hits": False,
        "query": {
            "function_score": {
                "query": _bool(
                    filter=[
                        {"term": {"active": True}},
                        {"range": {"startDate": {"gte": to_iso_z(cutoff)}}},
                    ],
                    must_not=[{"terms": {"id": excluded}}],
                ),
                "functions": [_gauss("startDate", base["startDate"], scale, decay)],
                "score_mode": "multiply",
                "boost_mode": "sum",
            }
        },
        "sort": [
            {"_score": {"order": "desc"}},
            {"startDate": {"order": "asc", "unmapped_type": "date"}},
            {"updated_at": {"order": "desc", "unmapped_type": "date"}},
        ],
        "collapse": _collapse_on_source_id(),
    }


ARTICLE_RELATED_SOURCE = [
    "id",
    "title",
    "slug",
    "heroImage",
    "thumbnail",
    "publicationDate",
    "active",
    "updated_at",
]


def related_articles_decay_query(
    base: dict[str, Any],
    *,
    exclude_ids: Iterable[str] = (),
    size: int,
    scale: str,
    decay: float,
) -> dict[str, Any]:
    excluded = sorted({str(base["id"]), *(str(i) for i in exclude_ids)})
    return {
        "size": size,
        "track_total_hits": False,
        "query": {
            "function_score": {
                "query": _bool(
                    filter=[
                        {"term": {"active": True}},
                        {"exists": {"field": "publicationDate"}},
                    ],
                    must_not=[{"terms": {"id": excluded}}],
                ),
                "functions": [_gauss("publicationDate", base["publicationDate"], scale, decay)],
                "score_mode": "multiply",
                "boost_mode": "sum",
            }
        },
        "sort": [
            {"_score": {"order": "desc"}},
            {"publicationDate": {"order": "desc", "unmapped_type": "date"}},
            {"updated_at": {"order": "desc", "unmapped_type": "date"}},
        ],
        "_source": ARTICLE_RELATED_SOURCE,
    }
