# schemas/article.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from schemas.common import CamelModel, utc_field
from schemas.i18n import I18nValue


class ArticleIn(CamelModel):
    id: Optional[int] = Field(default=None, gt=0)
    title: I18nValue
    slug: I18nValue
    body: I18nValue
    hero_image: str = Field(min_length=1)
    thumbnail: str = Field(min_length=1)
    publication_date: datetime
    active: bool = True

    @field_validator("publication_date")
    @classmethod
    def _date_utc(cls, v: datetime) -> datetime:
        return utc_field(v, "publicationDate")

    @field_validator("slug")
    @classmethod
    def _slug_lower(cls, v: I18nValue) -> I18nValue:
        return v.lower()
