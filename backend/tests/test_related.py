import pytest

from conftest import utc
from services.errors import ValidationError
from services.related import RelatedContentRanker, merge_results


BASE = {
    "id": "1",
    "slug": {"pt": "base", "en": "base", "es": "base"},
    "category": "7",
    "location": "3",
    "startDate": "2024-01-10T19:00:00.000Z",
}
NOW = utc(2024, 1, 5, 12, 0)


def _hit(i):
    return {"id": str(i), "startDate": "2024-01-12T19:00:00.000Z"}


@pytest.mark.asyncio
async def test_phase_one_full_skips_phase_two(fake_index, app_config):
    fake_index.slug_hits["base"] = BASE
    fake_index.search_results = [[_hit(i) for i in (2, 3, 4, 5)]]

    out = await RelatedContentRanker(fake_index, app_config).related_events("base", now=NOW)

    assert [d["id"] for d in out] == ["2", "3", "4", "5"]
    assert [c[0] for c in fake_index.calls] == ["get_by_slug", "search"]


@pytest.mark.asyncio
async def test_phase_two_asks_for_missing_count_only(fake_index, app_config):
    fake_index.slug_hits["base"] = BASE
    fake_index.search_results = [
        [_hit(2), _hit(3)],
        [_hit(3), _hit(8), _hit(9)],  # a repeated id must not appear twice
    ]

    out = await RelatedContentRanker(fake_index, app_config).related_events("base", now=NOW)

    assert [d["id"] for d in out] == ["2", "3", "8", "9"]
    phase1_body = fake_index.calls[1][2]
    phase2_body = fake_index.calls[2][2]
    assert phase1_body["size"] == 4
    assert phase2_body["size"] == 2

    # Phase 1 stays on the same facets and on still-relevant dates (now - 60 min)
    filters = phase1_body["query"]["bool"]["filter"]
    assert {"term": {"category": "7"}} in filters
    assert {"term": {"location": "3"}} in filters
    assert {"range": {"startDate": {"gte": "2024-01-05T11:00:00.000Z"}}} in filters

    inner = phase2_body["query"]["function_score"]["query"]["bool"]
    assert inner["must_not"] == [{"terms": {"id": ["1", "2", "3"]}}]


@pytest.mark.asyncio
async def test_base_item_never_in_results(fake_index, app_config):
    fake_index.slug_hits["base"] = BASE
    fake_index.search_results = [[_hit(1), _hit(2)], [_hit(1), _hit(5)]]

    out = await RelatedContentRanker(fake_index, app_config).related_events("base", now=NOW)
    assert "1" not in [d["id"] for d in out]


@pytest.mark.asyncio
async def test_unknown_base_yields_empty_list(fake_index, app_config):
    out = await RelatedContentRanker(fake_index, app_config).related_events("ghost", now=NOW)
    assert out == []
    assert [c[0] for c in fake_index.calls] == ["get_by_slug"]


@pytest.mark.asyncio
async def test_base_without_facets_yields_empty_list(fake_index, app_config):
    fake_index.slug_hits["base"] = {**BASE, "category": None}
    out = await RelatedContentRanker(fake_index, app_config).related_events("base", now=NOW)
    assert out == []


@pytest.mark.asyncio
async def test_related_articles_use_decay_only(fake_index, app_config):
    fake_index.slug_hits["art"] = {"id": "10", "publicationDate": "2024-01-01T00:00:00.000Z"}
    fake_index.search_results = [[{"id": "10"}, {"id": "11"}, {"id": "12"}]]

    out = await RelatedContentRanker(fake_index, app_config).related_articles("art")
    assert [d["id"] for d in out] == ["11", "12"]
    assert len([c for c in fake_index.calls if c[0] == "search"]) == 1


def test_merge_results_keeps_order_and_limit():
    out = merge_results("1", [_hit(2), _hit(2), _hit(3)], [_hit(4), _hit(5)], limit=3)
    assert [d["id"] for d in out] == ["2", "3", "4"]


@pytest.mark.asyncio
async def test_zero_requested_returns_nothing_without_searching(fake_index, app_config):
    fake_index.slug_hits["base"] = BASE
    fake_index.search_results = [[_hit(i) for i in (2, 3, 4, 5)]]
    ranker = RelatedContentRanker(fake_index, app_config)

    assert await ranker.related_events("base", now=NOW, target_count=0) == []
    assert await ranker.related_articles("base", target_count=0) == []
    assert fake_index.calls == []


@pytest.mark.asyncio
async def test_explicit_count_bounds_the_result(fake_index, app_config):
    fake_index.slug_hits["base"] = BASE
    fake_index.search_results = [[_hit(2)], [_hit(8), _hit(9)]]

    out = await RelatedContentRanker(fake_index, app_config).related_events(
        "base", now=NOW, target_count=1
    )
    assert [d["id"] for d in out] == ["2"]
    assert fake_index.calls[1][2]["size"] == 1
    assert len(fake_index.calls) == 2


@pytest.mark.asyncio
async def test_negative_count_is_rejected(fake_index, app_config):
    with pytest.raises(ValidationError):
        await RelatedContentRanker(fake_index, app_config).related_events("base", target_count=-1)
    assert fake_index.calls == []


@pytest.mark.asyncio
async def test_ranker_uses_its_clock_for_the_cutoff(fake_index, app_config):
    fake_index.slug_hits["base"] = BASE
    fake_index.search_results = [[_hit(i) for i in (2, 3, 4, 5)]]

    await RelatedContentRanker(fake_index, app_config, clock=lambda: NOW).related_events("base")

    filters = fake_index.calls[1][2]["query"]["bool"]["filter"]
    assert {"range": {"startDate": {"gte": "2024-01-05T11:00:00.000Z"}}} in filters
