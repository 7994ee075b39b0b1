"""
Related-content ranking.

Phase 1: exact facet match (same category and location), active, still
relevant by date. Sorted sponsored first, then nearest start, then most
recently updated.

Phase 2: only when Phase 1 is short. Gaussian decay over date distance from
the base item, excluding the base item and every Phase 1 id, asking for
exactly the missing count.

A base item that cannot be resolved, or lacks the fields needed to match on,
yields an empty list. There is no unfiltered fallback.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Callable, Iterable, Optional, Protocol

from config.app_config import AppConfig
from services.errors import ValidationError
from services.index_queries import (
    related_articles_decay_query,
    related_events_decay_query,
    related_events_exact_query,
)
from util.jsonlog import get_logger, log_event
from util.time import utcnow


logger = get_logger("related")

EVENT_REQUIRED_FIELDS = ("id", "category", "location", "startDate")
ARTICLE_REQUIRED_FIELDS = ("id", "publicationDate")


class SearchReader(Protocol):
    async def get_by_slug(self, index: str, slug: str) -> Optional[dict[str, Any]]: ...

    async def search(self, index: str, body: dict[str, Any]) -> list[dict[str, Any]]: ...


def _has_fields(doc: Optional[dict[str, Any]], fields: Iterable[str]) -> bool:
    return bool(doc) and all(doc.get(f) not in (None, "") for f in fields)


def merge_results(base_id: str, *groups: list[dict[str, Any]], limit: int) -> list[dict[str, Any]]:
    """Concatenates groups in order, dropping the base item and repeated ids."""
    seen = {str(base_id)}
    out: list[dict[str, Any]] = []
    for group in groups:
        for doc in group:
            doc_id = str(doc.get("id"))
            if doc_id in seen:
                continue
            seen.add(doc_id)
            out.append(doc)
            if len(out) >= limit:
                return out
    return out


class RelatedContentRanker:
    def __init__(
        self,
        client: SearchReader,
        config: AppConfig,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.client = client
        self.config = config
        self.clock = clock

    def relevance_cutoff(self, now: datetime) -> datetime:
        return now - timedelta(minutes=self.config.related_relevance_grace_minutes())

    def _target(self, target_count: Optional[int]) -> int:
        if target_count is None:
            return self.config.related_target_count()
        if target_count < 0:
            raise ValidationError("related count must be >= 0")
        return target_count

    async def related_events(
        self,
        slug: str,
        *,
        now: Optional[datetime] = None,
        target_count: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        index = self.config.index_name("event")
        target = self._target(target_count)
        if target == 0:
            return []

        base = await self.client.get_by_slug(index, slug)
        if not _has_fields(base, EVENT_REQUIRED_FIELDS):
            log_event(
                logger,
                level="INFO",
                event="related_base_unusable",
                msg="Related events skipped: base event missing or incomplete",
                slug=slug,
                found=base is not None,
            )
            return []

        base_id = str(base["id"])
        cutoff = self.relevance_cutoff(now or self.clock())

        exact = await self.client.search(
            index, related_events_exact_query(base, cutoff=cutoff, size=target)
        )
        phase1 = merge_results(base_id, exact, limit=target)
        if len(phase1) >= target:
            log_event(
                logger,
                level="INFO",
                event="related_events_ranked",
                msg="Related events resolved by exact match",
                slug=slug,
                phase1=len(phase1),
                phase2=0,
            )
            return phase1

        missing = target - len(phase1)
        decayed = await self.client.search(
            index,
            related_events_decay_query(
                base,
                exclude_ids=[d["id"] for d in phase1],
                cutoff=cutoff,
                size=missing,
                scale=self.config.related_decay_scale(),
                decay=self.config.related_decay(),
            ),
        )
        result = merge_results(base_id, phase1, decayed, limit=target)
        log_event(
            logger,
            level="INFO",
            event="related_events_ranked",
            msg="Related events resolved with date-decay fallback",
            slug=slug,
            phase1=len(phase1),
            phase2=len(result) - len(phase1),
        )
        return result

    async def related_articles(
        self, slug: str, *, target_count: Optional[int] = None
    ) -> list[dict[str, Any]]:
        """Articles carry no facet to match on, so only the date-decay phase applies."""
        index = self.config.index_name("article")
        target = self._target(target_count)
        if target == 0:
            return []

        base = await self.client.get_by_slug(index, slug)
        if not _has_fields(base, ARTICLE_REQUIRED_FIELDS):
            return []

        hits = await self.client.search(
            index,
            related_articles_decay_query(
                base,
                size=target,
                scale=self.config.related_decay_scale(),
                decay=self.config.related_decay(),
            ),
        )
        return merge_results(str(base["id"]), hits, limit=target)
