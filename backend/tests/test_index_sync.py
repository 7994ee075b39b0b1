"""
Index sync: one document per occurrence, deterministic ids, stale cleanup.
"""

import pytest

from conftest import event_payload, utc
from schemas.event import EventIn
from services import events_repo
from services.index_mappings import MAPPINGS
from services.index_sync import IndexSynchronizer
from services.occurrence_id import generate_occurrence_id


NOW = utc(2024, 1, 1, 12, 0)


def _insert(db, venue, **overrides) -> int:
    return events_repo.insert_event(db, EventIn.model_validate(event_payload(venue, **overrides)))


async def _sync(sync, db, event_id, now=NOW):
    row = events_repo.get_event(db, event_id)
    return await sync.sync_event(row, row.category, row.company, row.company.location, now=now)


@pytest.mark.asyncio
async def test_single_event_gets_one_document(db, venue, fake_index, app_config):
    event_id = _insert(db, venue)
    report = await _sync(IndexSynchronizer(fake_index, app_config), db, event_id)

    assert report.upserted == 1
    docs = fake_index.docs["events"]
    (doc,) = docs.values()
    assert doc["id"] == str(event_id)
    assert doc["esId"] == generate_occurrence_id(str(event_id), utc(2024, 1, 3, 19, 0))
    assert doc["category"] == str(venue["category"].id)
    assert doc["location"] == str(venue["location"].id)
    assert doc["geoLocation"] == {"lat": 38.71, "lon": -9.14}
    assert doc["company"]["address"]["city"] == "Lisboa"
    assert doc["recurring"] is False


@pytest.mark.asyncio
async def test_recurring_event_documents_per_occurrence(db, venue, fake_index, app_config):
    event_id = _insert(
        db,
        venue,
        recurrence={"rrule": "FREQ=WEEKLY;BYDAY=WE", "until": "2024-01-24T23:59:59Z", "exdates": ["2024-01-10T19:00:00Z"]},
    )
    report = await _sync(IndexSynchronizer(fake_index, app_config), db, event_id)

    starts = sorted(d["startDate"] for d in fake_index.docs["events"].values())
    assert starts == [
        "2024-01-03T19:00:00.000Z",
        "2024-01-17T19:00:00.000Z",
        "2024-01-24T19:00:00.000Z",
    ]
    assert report.upserted == 3
    assert len(set(report.occurrence_ids)) == 3
    # all occurrences go out in a single bulk request ahead of the stale cleanup
    assert [c[0] for c in fake_index.calls] == ["bulk_upsert", "delete_by_query"]
    assert fake_index.calls[0][2] == list(report.occurrence_ids)


@pytest.mark.asyncio
async def test_resync_is_idempotent(db, venue, fake_index, app_config):
    event_id = _insert(db, venue, recurrence={"rrule": "FREQ=DAILY;COUNT=3"})
    sync = IndexSynchronizer(fake_index, app_config)

    first = await _sync(sync, db, event_id)
    second = await _sync(sync, db, event_id)

    assert first.occurrence_ids == second.occurrence_ids
    assert second.stale_deleted == 0
    assert len(fake_index.docs["events"]) == 3


@pytest.mark.asyncio
async def test_rule_change_removes_stale_occurrences(db, venue, fake_index, app_config):
    event_id = _insert(db, venue, recurrence={"rrule": "FREQ=DAILY;COUNT=5"})
    sync = IndexSynchronizer(fake_index, app_config)
    await _sync(sync, db, event_id)
    assert len(fake_index.docs["events"]) == 5

    changed = EventIn.model_validate(
        event_payload(venue, id=event_id, recurrence={"rrule": "FREQ=DAILY;COUNT=2"})
    )
    assert events_repo.update_event(db, changed) is True
    report = await _sync(sync, db, event_id)

    assert report.stale_deleted == 3
    assert set(fake_index.docs["events"]) == set(report.occurrence_ids)

    # upserts come first, the cleanup last, and it never targets the fresh ids
    ops = [c[0] for c in fake_index.calls]
    assert ops[-1] == "delete_by_query"
    must_not = fake_index.calls[-1][2]["query"]["bool"]["must_not"][0]["terms"]["esId"]
    assert set(must_not) == set(report.occurrence_ids)


@pytest.mark.asyncio
async def test_past_occurrences_are_not_indexed(db, venue, fake_index, app_config):
    event_id = _insert(db, venue, recurrence={"rrule": "FREQ=WEEKLY;BYDAY=WE", "until": "2024-01-31T23:59:59Z"})
    report = await _sync(IndexSynchronizer(fake_index, app_config), db, event_id, now=utc(2024, 1, 20))
    assert report.upserted == 2  # Jan 24 and Jan 31


@pytest.mark.asyncio
async def test_remove_event_deletes_every_occurrence(db, venue, fake_index, app_config):
    event_id = _insert(db, venue, recurrence={"rrule": "FREQ=DAILY;COUNT=4"})
    sync = IndexSynchronizer(fake_index, app_config)
    await _sync(sync, db, event_id)

    assert await sync.remove_event(event_id) == 4
    assert fake_index.docs["events"] == {}


def test_mappings_keep_identifiers_and_facets_exact():
    props = MAPPINGS["event"]["mappings"]["properties"]
    for field in ("id", "esId", "category", "parentCategory", "location"):
        assert props[field]["type"] == "keyword"
    assert props["slug"]["properties"]["pt"]["fields"]["keyword"]["type"] == "keyword"
    assert set(MAPPINGS) == {"event", "article", "category"}
