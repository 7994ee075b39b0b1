# schemas/category.py
from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator

from schemas.common import CamelModel
from schemas.i18n import I18nValue, OptionalI18nValue


class CategoryIn(CamelModel):
    id: Optional[int] = Field(default=None, gt=0)
    name: I18nValue
    slug: I18nValue
    description: Optional[OptionalI18nValue] = None
    parent_id: Optional[int] = Field(default=None, gt=0)
    active: bool = True

    @field_validator("slug")
    @classmethod
    def _slug_lower(cls, v: I18nValue) -> I18nValue:
        return v.lower()
