# schemas/studio.py
from __future__ import annotations

from typing import List

from pydantic import BaseModel, field_validator

from schemas.common import CamelModel
from schemas.i18n import I18nValue


class StudioCategoryIn(BaseModel):
    name: I18nValue
    medias: List[str]

    @field_validator("medias")
    @classmethod
    def _paths(cls, v: List[str]) -> List[str]:
        paths = [(p or "").strip() for p in v]
        if any(not p for p in paths):
            raise ValueError("media paths must not be empty")
        return paths


class StudioIn(CamelModel):
    body: I18nValue
    categories: List[StudioCategoryIn]
