"""
Admin route guard.

CMS_AUTH_MODE=off leaves the admin API open (local work, tests).
CMS_AUTH_MODE=api_key requires an X-API-Key header matching one of the
comma-separated CMS_API_KEYS. Public routes are never guarded.
"""

from __future__ import annotations

import hmac
import os
from dataclasses import dataclass

from fastapi import Header, HTTPException, status

from services.errors import ConfigError


AUTH_MODES = ("off", "api_key")


@dataclass(frozen=True)
class AdminAuth:
    mode: str
    keys: frozenset[str]

    def accepts(self, presented: str | None) -> bool:
        if self.mode == "off":
            return True
        if not presented:
            return False
        given = presented.encode("utf-8")
        return any(hmac.compare_digest(given, k.encode("utf-8")) for k in self.keys)


def admin_auth_from_env() -> AdminAuth:
    mode = os.getenv("CMS_AUTH_MODE", "off").strip().lower()
    if mode not in AUTH_MODES:
        raise ConfigError(f"CMS_AUTH_MODE must be one of {', '.join(AUTH_MODES)}, got {mode!r}")
    keys = frozenset(k.strip() for k in os.getenv("CMS_API_KEYS", "").split(",") if k.strip())
    if mode == "api_key" and not keys:
        raise ConfigError("CMS_API_KEYS must list at least one key when CMS_AUTH_MODE=api_key")
    return AdminAuth(mode=mode, keys=keys)


def require_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> None:
    # read per request so key rotation only needs an env change and a reload
    if not admin_auth_from_env().accepts(x_api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or unknown X-API-Key",
        )


def validate_auth_config_on_startup() -> None:
    admin_auth_from_env()
