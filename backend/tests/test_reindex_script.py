import pytest

import reindex
from conftest import event_payload
from schemas.event import EventIn
from services import events_repo
from services.index_sync import IndexSynchronizer


def test_parse_args_requires_a_target():
    with pytest.raises(SystemExit):
        reindex.parse_args(["--kind", "event"])
    with pytest.raises(SystemExit):
        reindex.parse_args(["--kind", "ad", "--all"])

    args = reindex.parse_args(["--kind", "event", "--id", "3", "--id", "4", "--dry-run"])
    assert args.ids == [3, 4]
    assert args.dry_run is True


@pytest.mark.asyncio
async def test_dry_run_sends_nothing(db, venue, fake_index, app_config):
    event_id = events_repo.insert_event(
        db,
        EventIn.model_validate(
            event_payload(venue, startDate="2099-01-07T19:00:00Z", endDate="2099-01-07T21:00:00Z")
        ),
    )
    sync = IndexSynchronizer(fake_index, app_config)
    outcome = await reindex._sync_one(sync, db, "event", event_id, dry_run=True)
    assert outcome == "would index 1 occurrence(s)"
    assert fake_index.calls == []

    outcome = await reindex._sync_one(sync, db, "event", event_id, dry_run=False)
    assert outcome.startswith("upserted=1")
    assert await reindex._sync_one(sync, db, "event", 999, dry_run=False) == "missing"
