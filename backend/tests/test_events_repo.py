"""
Event store: transactional writes, recurrence replace/delete, toggle, lists.
"""

import pytest
from sqlalchemy import func, select

from conftest import event_payload, i18n
from models.event import Event, EventRecurrence
from schemas.event import EventIn
from services import events_repo
from services.errors import ValidationError


def _event(venue, **overrides) -> EventIn:
    return EventIn.model_validate(event_payload(venue, **overrides))


def test_insert_and_get_with_recurrence(db, venue):
    payload = _event(
        venue,
        recurrence={
            "rrule": "RRULE:FREQ=WEEKLY;BYDAY=WE",
            "until": "2024-01-24T23:59:59Z",
            "exdates": ["2024-01-10T19:00:00Z"],
        },
    )
    new_id = events_repo.insert_event(db, payload)
    assert isinstance(new_id, int)

    row = events_repo.get_event(db, new_id)
    assert row is not None
    assert row.slug_pt == "concerto pt"
    assert row.company.address.city == "Lisboa"
    assert row.recurrence.rrule == "FREQ=WEEKLY;BYDAY=WE"
    assert row.recurrence.exdates == ["2024-01-10T19:00:00.000Z"]

    d = events_repo.event_to_dict(row)
    assert d["startDate"] == "2024-01-03T19:00:00.000Z"
    assert d["title"] == i18n("Concerto")
    assert d["recurrence"]["until"] == "2024-01-24T23:59:59.000Z"


def test_insert_failure_leaves_nothing_behind(db, venue):
    first = events_repo.insert_event(db, _event(venue, recurrence={"rrule": "FREQ=DAILY"}))
    assert first is not None

    # same slugs -> unique violation; the recurrence row must not survive either
    dup = events_repo.insert_event(db, _event(venue, recurrence={"rrule": "FREQ=WEEKLY"}))
    assert dup is None
    assert db.execute(select(func.count()).select_from(Event)).scalar_one() == 1
    assert db.execute(select(func.count()).select_from(EventRecurrence)).scalar_one() == 1


def test_update_replaces_and_removes_recurrence(db, venue):
    new_id = events_repo.insert_event(db, _event(venue, recurrence={"rrule": "FREQ=DAILY"}))

    changed = _event(
        venue,
        id=new_id,
        title=i18n("Recital"),
        recurrence={"rrule": "FREQ=MONTHLY;BYMONTHDAY=3"},
    )
    assert events_repo.update_event(db, changed) is True
    row = events_repo.get_event(db, new_id)
    assert row.title_en == "Recital en"
    assert row.recurrence.rrule == "FREQ=MONTHLY;BYMONTHDAY=3"

    assert events_repo.update_event(db, _event(venue, id=new_id)) is True
    row = events_repo.get_event(db, new_id)
    assert row.recurrence is None
    assert db.execute(select(func.count()).select_from(EventRecurrence)).scalar_one() == 0


def test_update_of_missing_row_returns_false(db, venue):
    assert events_repo.update_event(db, _event(venue, id=999)) is False


def test_update_without_id_is_a_validation_error(db, venue):
    with pytest.raises(ValidationError):
        events_repo.update_event(db, _event(venue))


def test_set_active_toggles_and_refreshes_updated_at(db, venue):
    new_id = events_repo.insert_event(db, _event(venue))
    before = events_repo.get_event(db, new_id).updated_at

    assert events_repo.set_event_active(db, new_id, False) is True
    row = events_repo.get_event(db, new_id)
    assert row.active is False
    assert row.updated_at >= before

    assert events_repo.set_event_active(db, 999, True) is False


def test_get_with_invalid_id_fails_before_io(db):
    with pytest.raises(ValidationError):
        events_repo.get_event(db, "abc")


def test_get_missing_returns_none(db):
    assert events_repo.get_event(db, 12345) is None


def test_list_filters_by_name_in_any_locale(db, venue):
    events_repo.insert_event(db, _event(venue))
    events_repo.insert_event(
        db,
        _event(
            venue,
            title={"pt": "Fado ao vivo", "en": "Live fado", "es": "Fado en vivo"},
            slug=i18n("fado"),
        ),
    )

    assert len(events_repo.list_events(db, skip=0, take=10)) == 2
    hits = events_repo.list_events(db, skip=0, take=10, name="LIVE")
    assert [h["slug"]["pt"] for h in hits] == ["fado pt"]
    assert events_repo.list_events(db, skip=1, take=10, name="fado") == []


def test_list_rejects_bad_paging(db):
    with pytest.raises(ValidationError):
        events_repo.list_events(db, skip=-1, take=10)
    with pytest.raises(ValidationError):
        events_repo.list_events(db, skip=0, take=0)
