"""
Signed HTTP client for the search index service (OpenSearch, SigV4 service "es").

Every request body is serialised exactly once. Those bytes are signed and
those same bytes are sent.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Optional
from urllib.parse import quote, urlencode, urlsplit

import httpx
from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials, ReadOnlyCredentials
from botocore.session import Session as BotocoreSession
from fastapi.concurrency import run_in_threadpool

from config.app_config import AppConfig
from services.errors import ConfigError, IndexSyncError
from services.index_queries import slug_query
from util.jsonlog import get_logger, log_event


logger = get_logger("index")

SIGNING_SERVICE = "es"
UPSERT_OK_RESULTS = ("created", "updated")


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _serialize(body: Any) -> tuple[bytes | None, str]:
    if body is None:
        return None, "application/json"
    if isinstance(body, str):
        # pre-built NDJSON (bulk) or JSON text
        ctype = "application/x-ndjson" if "\n" in body else "application/json"
        return body.encode("utf-8"), ctype
    return _dumps(body).encode("utf-8"), "application/json"


class SearchIndexClient:
    def __init__(
        self,
        *,
        domain: str,
        region: str,
        credentials: Credentials,
        http_client: httpx.AsyncClient,
        timeout: float = 10.0,
    ) -> None:
        base = domain.rstrip("/")
        self.base_url = base if base.startswith("http") else f"https://{base}"
        self.host = urlsplit(self.base_url).netloc
        self.region = region
        self.credentials = credentials
        self.http_client = http_client
        self.timeout = timeout

    @classmethod
    def from_config(
        cls, config: AppConfig, http_client: Optional[httpx.AsyncClient] = None
    ) -> "SearchIndexClient":
        creds = BotocoreSession().get_credentials()
        if creds is None:
            raise ConfigError("No AWS credentials found for the search index client")
        return cls(
            domain=config.search_domain(),
            region=config.search_region(),
            credentials=creds,
            http_client=http_client or httpx.AsyncClient(),
            timeout=config.search_timeout_seconds(),
        )

    async def aclose(self) -> None:
        await self.http_client.aclose()

    def _sign(
        self,
        frozen: ReadOnlyCredentials,
        method: str,
        url: str,
        payload: bytes | None,
        content_type: str,
    ) -> dict[str, str]:
        headers = {
            "Host": self.host,
            "Content-Type": content_type,
            "X-Amz-Content-SHA256": hashlib.sha256(payload or b"").hexdigest(),
        }
        req = AWSRequest(method=method, url=url, data=payload, headers=headers)
        SigV4Auth(frozen, SIGNING_SERVICE, self.region).add_auth(req)
        return dict(req.headers.items())

    async def _send(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        params: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        payload, content_type = _serialize(body)
        url = f"{self.base_url}{path}"
        if params:
            url = f"{url}?{urlencode(sorted(params.items()))}"

        # refreshable credentials (instance/container roles) may block on a metadata call
        frozen = await run_in_threadpool(self.credentials.get_frozen_credentials)
        headers = self._sign(frozen, method, url, payload, content_type)
        try:
            return await self.http_client.request(
                method, url, content=payload, headers=headers, timeout=self.timeout
            )
        except httpx.HTTPError as e:
            log_event(
                logger,
                level="ERROR",
                event="search_transport_error",
                msg="Search index request failed before a response was received",
                method=method,
                path=path,
                error=str(e),
            )
            raise IndexSyncError(f"search request {method} {path} failed") from e

    def _raise_for_status(self, resp: httpx.Response, action: str, path: str) -> None:
        if resp.is_success:
            return
        text = resp.text[:2000]
        log_event(
            logger,
            level="ERROR",
            event="search_http_error",
            msg=f"Search index {action} failed",
            path=path,
            status=resp.status_code,
            response_text=text,
        )
        raise IndexSyncError(f"{action} failed", status=resp.status_code, body=text)

    @staticmethod
    def _json(resp: httpx.Response, action: str) -> dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise IndexSyncError(
                f"{action} returned malformed JSON", status=resp.status_code, body=resp.text[:2000]
            ) from e
        if not isinstance(data, dict):
            raise IndexSyncError(f"{action} returned unexpected payload", status=resp.status_code)
        return data

    async def upsert_document(self, index: str, document_id: str, document: dict[str, Any]) -> bool:
        """Full replace of one document. Raises IndexSyncError unless created/updated."""
        path = f"/{index}/_doc/{quote(str(document_id), safe='')}"
        resp = await self._send("PUT", path, body=document)
        self._raise_for_status(resp, "upsert", path)
        result = self._json(resp, "upsert").get("result")
        if result not in UPSERT_OK_RESULTS:
            raise IndexSyncError(
                f"upsert returned unexpected result {result!r}",
                status=resp.status_code,
                body=resp.text[:2000],
            )
        return True

    async def bulk_upsert(
        self, index: str, documents: list[dict[str, Any]], *, id_field: str = "esId"
    ) -> int:
        """
        Full replace of many documents in one NDJSON `_bulk` request, keyed by
        `id_field`. Any failed item fails the whole call with IndexSyncError.
        """
        if not documents:
            return 0
        lines = []
        for doc in documents:
            doc_id = doc.get(id_field)
            if not doc_id:
                raise IndexSyncError(f"bulk document without `{id_field}`")
            lines.append(_dumps({"index": {"_id": str(doc_id)}}))
            lines.append(_dumps(doc))
        path = f"/{index}/_bulk"
        resp = await self._send("POST", path, body="\n".join(lines) + "\n")
        self._raise_for_status(resp, "bulk upsert", path)
        data = self._json(resp, "bulk upsert")
        if data.get("errors"):
            failed = [
                item.get("index", {})
                for item in data.get("items") or []
                if isinstance(item, dict) and item.get("index", {}).get("error")
            ]
            log_event(
                logger,
                level="ERROR",
                event="search_bulk_item_errors",
                msg="Bulk upsert rejected some documents",
                path=path,
                failed=len(failed),
                first_error=failed[0].get("error") if failed else None,
            )
            raise IndexSyncError(
                f"bulk upsert rejected {len(failed)} of {len(documents)} documents",
                status=resp.status_code,
                body=resp.text[:2000],
            )
        return len(documents)

    async def get_document(self, index: str, document_id: str) -> Optional[dict[str, Any]]:
        path = f"/{index}/_source/{quote(str(document_id), safe='')}"
        resp = await self._send("GET", path)
        if resp.status_code == 404:
            return None
        self._raise_for_status(resp, "get", path)
        return self._json(resp, "get")

    async def search(self, index: str, body: dict[str, Any]) -> list[dict[str, Any]]:
        path = f"/{index}/_search"
        resp = await self._send("POST", path, body=body)
        self._raise_for_status(resp, "search", path)
        hits = (self._json(resp, "search").get("hits") or {}).get("hits") or []
        return [h["_source"] for h in hits if isinstance(h, dict) and h.get("_source")]

    async def get_by_slug(self, index: str, slug: str) -> Optional[dict[str, Any]]:
        if not slug or not slug.strip():
            return None
        hits = await self.search(index, slug_query(slug))
        return hits[0] if hits else None

    async def ensure_index(self, index: str, mapping: dict[str, Any]) -> bool:
        """Creates the index with mapping if missing. Returns True when created."""
        path = f"/{index}"
        resp = await self._send("HEAD", path)
        if resp.status_code == 200:
            return False
        if resp.status_code != 404:
            self._raise_for_status(resp, "index exists check", path)
        resp = await self._send("PUT", path, body=mapping)
        self._raise_for_status(resp, "create index", path)
        return True

    async def delete_by_query(self, index: str, body: dict[str, Any]) -> int:
        path = f"/{index}/_delete_by_query"
        resp = await self._send(
            "POST",
            path,
            body=body,
            params={"conflicts": "proceed", "refresh": "true", "wait_for_completion": "true"},
        )
        self._raise_for_status(resp, "delete_by_query", path)
        deleted = self._json(resp, "delete_by_query").get("deleted", 0)
        return int(deleted or 0)
