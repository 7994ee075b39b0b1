# schemas/common.py
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from util.time import require_utc_aware


class CamelModel(BaseModel):
    """Admin payloads use camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def utc_field(v: datetime | None, field_name: str) -> datetime | None:
    if v is None:
        return None
    return require_utc_aware(v, field_name=field_name)


class ActiveToggle(BaseModel):
    active: bool
