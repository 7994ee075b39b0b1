"""
Pushes committed relational state to the search index.

Callers commit the relational transaction first and only then call into this
module. A failure here never undoes the commit; it surfaces as IndexSyncError
and the caller reports it separately.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Protocol

from config.app_config import AppConfig
from models.article import Article
from models.category import Category
from models.company import Company
from models.event import Event
from models.location import Location
from services.index_documents import article_document, category_document, event_documents
from services.index_queries import occurrences_query, stale_occurrences_query
from services.recurrence import (
    OccurrenceWindow,
    Recurrence,
    expand_occurrences,
    horizon_from,
)
from util.jsonlog import get_logger, log_event
from util.time import from_db_utc, utcnow


logger = get_logger("sync")


class IndexClient(Protocol):
    async def upsert_document(self, index: str, document_id: str, document: dict) -> bool: ...

    async def bulk_upsert(self, index: str, documents: list[dict]) -> int: ...

    async def delete_by_query(self, index: str, body: dict) -> int: ...


@dataclass(frozen=True)
class SyncReport:
    source_id: str
    upserted: int
    stale_deleted: int
    occurrence_ids: tuple[str, ...]


class IndexSynchronizer:
    def __init__(
        self,
        client: IndexClient,
        config: AppConfig,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.client = client
        self.config = config
        self.clock = clock

    def event_windows(self, event: Event, *, now: Optional[datetime] = None) -> list[OccurrenceWindow]:
        """
        Occurrence windows to index for an event.

        Non-recurring: exactly the anchor window. Recurring: instances from
        now (still-running ones included) up to min(until, now + horizon).
        """
        now = now or self.clock()
        start = from_db_utc(event.start_date)
        end = from_db_utc(event.end_date)

        if event.recurrence is None:
            return [OccurrenceWindow(start=start, end=end)]

        rule = Recurrence.from_row(event.recurrence)
        expansion = expand_occurrences(
            start,
            end,
            rule,
            horizon_from(now, self.config.recurrence_horizon_months()),
            not_before=now,
            max_occurrences=self.config.recurrence_max_occurrences(),
        )
        return list(expansion.windows())

    async def sync_event(
        self,
        event: Event,
        category: Category,
        company: Company,
        location: Location,
        *,
        now: Optional[datetime] = None,
    ) -> SyncReport:
        index = self.config.index_name("event")
        source_id = str(event.id)

        windows = self.event_windows(event, now=now)
        docs = event_documents(event, category, company, location, windows)

        await self.client.bulk_upsert(index, docs)

        # Fresh documents are in place; drop whatever the previous rule produced
        # that the current one no longer does.
        keep = tuple(d["esId"] for d in docs)
        stale = await self.client.delete_by_query(index, stale_occurrences_query(source_id, keep))

        log_event(
            logger,
            level="INFO",
            event="event_synced",
            msg="Event occurrences synced to index",
            source_id=source_id,
            upserted=len(docs),
            stale_deleted=stale,
            recurring=event.recurrence is not None,
        )
        return SyncReport(
            source_id=source_id,
            upserted=len(docs),
            stale_deleted=stale,
            occurrence_ids=keep,
        )

    async def remove_event(self, source_id: str | int) -> int:
        index = self.config.index_name("event")
        deleted = await self.client.delete_by_query(index, occurrences_query(str(source_id)))
        log_event(
            logger,
            level="INFO",
            event="event_removed",
            msg="Event occurrences removed from index",
            source_id=str(source_id),
            deleted=deleted,
        )
        return deleted

    async def sync_article(self, article: Article) -> bool:
        doc = article_document(article)
        return await self.client.upsert_document(self.config.index_name("article"), doc["id"], doc)

    async def sync_category(self, category: Category) -> bool:
        doc = category_document(category)
        return await self.client.upsert_document(self.config.index_name("category"), doc["id"], doc)
