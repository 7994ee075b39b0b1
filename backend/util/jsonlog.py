"""
One JSON object per line on stdout, one logger per component.

    log_event(logger, level="WARN", event="index_sync_failed", msg="...", entity_id=7)

Request bodies, index documents, signed headers and credentials never reach
the log: deny-listed fields are dropped at the top level and redacted when
nested. CMS_LOG_PAYLOADS=1 keeps their keys (still redacted) for local work.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any

from util.time import to_iso_z, utcnow


NAMESPACE = "cms"
REDACTED = "<redacted>"
MAX_STR = 800
MAX_ITEMS = 50
MAX_DEPTH = 3

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

_DENY_KEYS = frozenset(
    {
        "body",
        "document",
        "documents",
        "payload",
        "headers",
        "authorization",
        "x-api-key",
        "x-amz-security-token",
        "api_key",
        "token",
        "password",
        "secret",
        "database_url",
    }
)


def _keep_payload_keys() -> bool:
    return os.getenv("CMS_LOG_PAYLOADS", "").strip().lower() in ("1", "true", "yes", "on")


def get_logger(component: str) -> logging.Logger:
    logger = logging.getLogger(f"{NAMESPACE}.{component}")
    if not logger.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(h)
        logger.setLevel(_LEVELS.get(os.getenv("CMS_LOG_LEVEL", "INFO").upper(), logging.INFO))
        logger.propagate = False
    return logger


def _clean(value: Any, depth: int = 0) -> Any:
    if depth > MAX_DEPTH:
        return "<max_depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, datetime):
        return to_iso_z(value) if value.tzinfo is not None else value.isoformat()
    if isinstance(value, dict):
        return {
            str(k): REDACTED if str(k).lower() in _DENY_KEYS else _clean(v, depth + 1)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_clean(v, depth + 1) for v in list(value)[:MAX_ITEMS]]
    text = value if isinstance(value, str) else str(value)
    return text if len(text) <= MAX_STR else text[:MAX_STR] + "...<truncated>"


def log_event(
    logger: logging.Logger,
    *,
    level: str,
    event: str,
    msg: str,
    **fields: Any,
) -> None:
    levelno = _LEVELS.get((level or "").upper(), logging.INFO)
    if not logger.isEnabledFor(levelno):
        return

    record: dict[str, Any] = {
        "ts": to_iso_z(utcnow()),
        "level": logging.getLevelName(levelno),
        "component": logger.name.removeprefix(f"{NAMESPACE}."),
        "event": event,
        "msg": msg,
    }
    keep_keys = _keep_payload_keys()
    for key, value in fields.items():
        if key.lower() in _DENY_KEYS:
            if keep_keys:
                record[key] = REDACTED
            continue
        record[key] = _clean(value)

    logger.log(levelno, json.dumps(record, ensure_ascii=False, separators=(",", ":")))
