#!/usr/bin/env python3
"""
Re-sync relational content into the search index.

Manual retry path for writes whose index sync failed (the admin API reports
them as indexed=false), and full rebuilds after a mapping change.
Needs the backend modules importable (`pip install -e .` or PYTHONPATH=backend).

Examples:
  reindex.py --kind event --id 42
  reindex.py --kind event --all --dry-run
  reindex.py --kind category --all --create-indexes
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List

from config.app_config import INDEX_KINDS, load_app_config
from db import create_db_engine, make_session_factory
from services import articles_repo, categories_repo, events_repo
from services.errors import IndexSyncError
from services.index_mappings import MAPPINGS
from services.index_sync import IndexSynchronizer
from services.search_client import SearchIndexClient


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Re-sync CMS content into the search index")
    p.add_argument("--kind", required=True, choices=INDEX_KINDS)
    target = p.add_mutually_exclusive_group(required=True)
    target.add_argument("--id", type=int, action="append", dest="ids", help="Entity id (repeatable)")
    target.add_argument("--all", action="store_true", help="Every row of the given kind")
    p.add_argument("--dry-run", action="store_true", help="Resolve rows and documents, send nothing")
    p.add_argument("--create-indexes", action="store_true", help="Create missing indexes with mappings first")
    return p.parse_args(argv)


def _ids_for(db, kind: str, args: argparse.Namespace) -> List[int]:
    if args.ids:
        return list(args.ids)
    if kind == "event":
        return events_repo.list_event_ids(db)
    if kind == "article":
        return articles_repo.list_article_ids(db)
    return categories_repo.list_category_ids(db)


async def _sync_one(sync: IndexSynchronizer, db, kind: str, entity_id: int, dry_run: bool) -> str:
    if kind == "event":
        row = events_repo.get_event(db, entity_id)
        if row is None:
            return "missing"
        if dry_run:
            return f"would index {len(sync.event_windows(row))} occurrence(s)"
        report = await sync.sync_event(row, row.category, row.company, row.company.location)
        return f"upserted={report.upserted} stale_deleted={report.stale_deleted}"

    if kind == "article":
        row = articles_repo.get_article(db, entity_id)
        if row is None:
            return "missing"
        if not dry_run:
            await sync.sync_article(row)
        return "ok" if not dry_run else "would index 1 document"

    row = categories_repo.get_category(db, entity_id)
    if row is None:
        return "missing"
    if not dry_run:
        await sync.sync_category(row)
    return "ok" if not dry_run else "would index 1 document"


async def run(args: argparse.Namespace) -> int:
    cfg = load_app_config()
    engine = create_db_engine(cfg.database_url())
    session_factory = make_session_factory(engine)
    client = SearchIndexClient.from_config(cfg)
    sync = IndexSynchronizer(client, cfg)
    failures = 0

    try:
        if args.create_indexes and not args.dry_run:
            created = await client.ensure_index(cfg.index_name(args.kind), MAPPINGS[args.kind])
            print(f"[INFO] index {cfg.index_name(args.kind)}: {'created' if created else 'exists'}")

        with session_factory() as db:
            ids = _ids_for(db, args.kind, args)
            print(f"[INFO] {args.kind}: {len(ids)} row(s) to process (dry_run={args.dry_run})")
            for entity_id in ids:
                try:
                    outcome = await _sync_one(sync, db, args.kind, entity_id, args.dry_run)
                except IndexSyncError as e:
                    failures += 1
                    print(f"[ERROR] {args.kind} {entity_id}: {e}", file=sys.stderr)
                    continue
                print(f"[OK] {args.kind} {entity_id}: {outcome}")
    finally:
        await client.aclose()
        engine.dispose()

    return 1 if failures else 0


def main() -> None:
    raise SystemExit(asyncio.run(run(parse_args())))


if __name__ == "__main__":
    main()
