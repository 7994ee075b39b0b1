import hashlib
import json
import threading
from datetime import datetime, timezone

import httpx
import pytest
from botocore.credentials import Credentials

from services.errors import IndexSyncError
from services.index_queries import escape_wildcard, event_list_query, stale_occurrences_query
from services.search_client import SearchIndexClient


def _client(handler) -> SearchIndexClient:
    return SearchIndexClient(
        domain="search-test.us-east-1.es.amazonaws.com",
        region="us-east-1",
        credentials=Credentials("AKIDEXAMPLE", "secret"),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_upsert_sends_signed_body_it_hashed():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"result": "created"})

    client = _client(handler)
    doc = {"id": "42", "title": {"pt": "Olá", "en": "Hello", "es": "Hola"}}
    assert await client.upsert_document("events", "a/b", doc) is True
    await client.aclose()

    req = seen[0]
    assert req.method == "PUT"
    assert req.url.raw_path == b"/events/_doc/a%2Fb"
    assert req.headers["host"] == "search-test.us-east-1.es.amazonaws.com"
    assert req.headers["x-amz-content-sha256"] == hashlib.sha256(req.content).hexdigest()
    assert req.headers["authorization"].startswith("AWS4-HMAC-SHA256 Credential=AKIDEXAMPLE/")
    assert "/us-east-1/es/aws4_request" in req.headers["authorization"]
    assert "x-amz-date" in req.headers
    assert json.loads(req.content) == doc


@pytest.mark.asyncio
async def test_bulk_upsert_sends_one_ndjson_request_keyed_by_occurrence():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"errors": False, "items": [{"index": {"status": 201}}] * 2})

    client = _client(handler)
    docs = [{"id": "7", "esId": "occ-1"}, {"id": "7", "esId": "occ-2"}]
    assert await client.bulk_upsert("events", docs) == 2
    await client.aclose()

    (req,) = seen
    assert req.method == "POST"
    assert req.url.path == "/events/_bulk"
    assert req.headers["content-type"] == "application/x-ndjson"
    assert req.headers["x-amz-content-sha256"] == hashlib.sha256(req.content).hexdigest()
    text = req.content.decode("utf-8")
    assert text.endswith("\n")
    lines = [json.loads(line) for line in text.splitlines()]
    assert lines == [
        {"index": {"_id": "occ-1"}},
        docs[0],
        {"index": {"_id": "occ-2"}},
        docs[1],
    ]


@pytest.mark.asyncio
async def test_bulk_upsert_item_errors_raise():
    body = {
        "errors": True,
        "items": [
            {"index": {"_id": "occ-1", "status": 201}},
            {"index": {"_id": "occ-2", "status": 400, "error": {"type": "mapper_parsing_exception"}}},
        ],
    }
    client = _client(lambda request: httpx.Response(200, json=body))
    with pytest.raises(IndexSyncError) as exc:
        await client.bulk_upsert("events", [{"esId": "occ-1"}, {"esId": "occ-2"}])
    assert "1 of 2" in exc.value.message
    await client.aclose()


@pytest.mark.asyncio
async def test_bulk_upsert_empty_sends_nothing():
    seen = []
    client = _client(lambda request: seen.append(request) or httpx.Response(200, json={}))
    assert await client.bulk_upsert("events", []) == 0
    await client.aclose()
    assert seen == []


class _ThreadRecordingCredentials(Credentials):
    def __init__(self):
        super().__init__("AKIDEXAMPLE", "secret")
        self.threads = []

    def get_frozen_credentials(self):
        self.threads.append(threading.get_ident())
        return super().get_frozen_credentials()


@pytest.mark.asyncio
async def test_credentials_resolve_off_the_event_loop():
    creds = _ThreadRecordingCredentials()
    client = SearchIndexClient(
        domain="search-test.us-east-1.es.amazonaws.com",
        region="us-east-1",
        credentials=creds,
        http_client=httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"hits": {"hits": []}}))
        ),
    )
    await client.search("events", {"size": 1})
    await client.aclose()

    assert creds.threads
    assert threading.get_ident() not in creds.threads


@pytest.mark.asyncio
@pytest.mark.parametrize("status,body", [(200, {"result": "noop"}), (500, {"error": "boom"})])
async def test_upsert_unexpected_result_raises(status, body):
    client = _client(lambda request: httpx.Response(status, json=body))
    with pytest.raises(IndexSyncError) as exc:
        await client.upsert_document("events", "x", {"id": "1"})
    assert exc.value.status == status
    await client.aclose()


@pytest.mark.asyncio
async def test_transport_failure_becomes_index_sync_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    client = _client(handler)
    with pytest.raises(IndexSyncError):
        await client.search("events", {"query": {"match_all": {}}})
    await client.aclose()


@pytest.mark.asyncio
async def test_get_document_missing_returns_none():
    client = _client(lambda request: httpx.Response(404, json={"found": False}))
    assert await client.get_document("events", "nope") is None
    await client.aclose()


@pytest.mark.asyncio
async def test_search_returns_sources():
    hits = {"hits": {"hits": [{"_source": {"id": "1"}}, {"_source": {"id": "2"}}]}}
    client = _client(lambda request: httpx.Response(200, json=hits))
    assert await client.search("events", {"size": 2}) == [{"id": "1"}, {"id": "2"}]
    await client.aclose()


@pytest.mark.asyncio
async def test_get_by_slug_lowercases_and_matches_every_locale():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"hits": {"hits": []}})

    client = _client(handler)
    assert await client.get_by_slug("events", "  Fado-Vivo ") is None
    await client.aclose()

    should = seen[0]["query"]["bool"]["should"]
    assert {"term": {"slug.en.keyword": "fado-vivo"}} in should
    assert len(should) == 3


@pytest.mark.asyncio
async def test_delete_by_query_params_and_count():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"deleted": 3})

    client = _client(handler)
    body = stale_occurrences_query("42", ["b", "a"])
    assert await client.delete_by_query("events", body) == 3
    await client.aclose()

    req = seen[0]
    assert req.url.path == "/events/_delete_by_query"
    assert req.url.params["conflicts"] == "proceed"
    assert req.url.params["refresh"] == "true"
    assert json.loads(req.content)["query"]["bool"]["must_not"] == [{"terms": {"esId": ["a", "b"]}}]


@pytest.mark.asyncio
async def test_ensure_index_creates_only_when_missing():
    methods = []

    def handler(request):
        methods.append(request.method)
        if request.method == "HEAD":
            return httpx.Response(404)
        return httpx.Response(200, json={"acknowledged": True})

    client = _client(handler)
    assert await client.ensure_index("events", {"mappings": {}}) is True
    await client.aclose()
    assert methods == ["HEAD", "PUT"]


def test_wildcard_terms_are_escaped():
    assert escape_wildcard(" Rock*N?Roll\\ ") == "rock\\*n\\?roll\\\\"


def test_event_list_query_filters_category_or_parent():
    q = event_list_query(
        skip=0,
        take=10,
        name="jazz*",
        from_date=None,
        category_ids=["3"],
        now=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    filters = q["query"]["bool"]["filter"]
    assert {"range": {"startDate": {"gte": "2024-01-01T00:00:00.000Z"}}} in filters
    assert filters[0]["bool"]["should"] == [
        {"terms": {"category": ["3"]}},
        {"terms": {"parentCategory": ["3"]}},
    ]
    wildcard = q["query"]["bool"]["must"][0]["bool"]["should"][0]["wildcard"]
    assert wildcard["title.pt.keyword"]["value"] == "*jazz\\**"
    assert q["collapse"]["field"] == "id"
