from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from services.errors import ConfigError


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "app.yaml"

INDEX_KINDS = ("event", "article", "category")

# env var -> (section, key)
_ENV_OVERRIDES = {
    "CMS_DATABASE_URL": ("database", "url"),
    "CMS_SEARCH_DOMAIN": ("search", "domain"),
    "CMS_SEARCH_REGION": ("search", "region"),
}


@dataclass(frozen=True)
class AppConfig:
    raw: Dict[str, Any]

    def _section(self, name: str) -> Dict[str, Any]:
        s = self.raw.get(name, {}) if isinstance(self.raw, dict) else {}
        return s if isinstance(s, dict) else {}

    def _positive_int(self, section: str, key: str, default: int) -> int:
        try:
            v = int(self._section(section).get(key, default))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{section}.{key} must be an integer") from e
        if v <= 0:
            raise ConfigError(f"{section}.{key} must be > 0")
        return v

    # database
    def database_url(self) -> str:
        return str(self._section("database").get("url", "sqlite://"))

    def database_pool_size(self) -> int:
        return self._positive_int("database", "pool_size", 5)

    def database_max_overflow(self) -> int:
        return int(self._section("database").get("max_overflow", 5))

    # search
    def search_domain(self) -> str:
        domain = str(self._section("search").get("domain", "")).strip()
        if not domain:
            raise ConfigError("search.domain must be set")
        return domain

    def search_region(self) -> str:
        # Semantics: search.region -> AWS_REGION -> AWS_DEFAULT_REGION -> us-east-1
        region = self._section("search").get("region")
        return str(
            region
            or os.getenv("AWS_REGION")
            or os.getenv("AWS_DEFAULT_REGION")
            or "us-east-1"
        )

    def search_timeout_seconds(self) -> float:
        return float(self._section("search").get("timeout_seconds", 10))

    def index_name(self, kind: str) -> str:
        if kind not in INDEX_KINDS:
            raise ConfigError(f"Unknown index kind: {kind!r}")
        indexes = self._section("search").get("indexes", {}) or {}
        name = indexes.get(kind)
        if not name:
            raise ConfigError(f"search.indexes.{kind} must be set")
        return str(name)

    # recurrence
    def recurrence_horizon_months(self) -> int:
        return self._positive_int("recurrence", "horizon_months", 12)

    def recurrence_max_occurrences(self) -> int:
        return self._positive_int("recurrence", "max_occurrences", 500)

    # related content
    def related_target_count(self) -> int:
        return self._positive_int("related", "target_count", 4)

    def related_decay_scale(self) -> str:
        return str(self._section("related").get("decay_scale", "14d"))

    def related_decay(self) -> float:
        d = float(self._section("related").get("decay", 0.5))
        if not 0.0 < d < 1.0:
            raise ConfigError("related.decay must be between 0 and 1 (exclusive)")
        return d

    def related_relevance_grace_minutes(self) -> int:
        return int(self._section("related").get("relevance_grace_minutes", 60))

    # store
    def list_max_take(self) -> int:
        return self._positive_int("store", "list_max_take", 500)

    def like_case_sensitive(self) -> bool:
        return bool(self._section("store").get("like_case_sensitive", False))


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    for env_name, (section, key) in _ENV_OVERRIDES.items():
        v = os.getenv(env_name)
        if v:
            data.setdefault(section, {})[key] = v

    for kind in INDEX_KINDS:
        v = os.getenv(f"CMS_{kind.upper()}_INDEX")
        if v:
            data.setdefault("search", {}).setdefault("indexes", {})[kind] = v
    return data


_cached: Optional[AppConfig] = None


def load_app_config(path: Path | None = None) -> AppConfig:
    global _cached
    if _cached is not None and path is None:
        return _cached

    p = path or DEFAULT_CONFIG_PATH
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    cfg = AppConfig(raw=_apply_env_overrides(data))
    if path is None:
        _cached = cfg
    return cfg
