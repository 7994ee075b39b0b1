# schemas/event.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import AnyHttpUrl, Field, field_validator, model_validator

from schemas.common import CamelModel, utc_field
from schemas.i18n import I18nValue
from services.recurrence import normalize_rrule


class RecurrenceIn(CamelModel):
    rrule: str
    until: Optional[datetime] = None
    exdates: List[datetime] = Field(default_factory=list)
    rdates: List[datetime] = Field(default_factory=list)

    @field_validator("rrule")
    @classmethod
    def _rrule_parses(cls, v: str) -> str:
        # raises RecurrenceConfigError (a ValueError) on bad input
        return normalize_rrule(v)

    @field_validator("until")
    @classmethod
    def _until_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return utc_field(v, "recurrence.until")

    @field_validator("exdates", "rdates")
    @classmethod
    def _dates_utc(cls, v: List[datetime]) -> List[datetime]:
        return [utc_field(d, "recurrence date") for d in v]


class EventIn(CamelModel):
    id: Optional[int] = Field(default=None, gt=0)

    title: I18nValue
    slug: I18nValue
    body: I18nValue

    category_id: int = Field(gt=0)
    company_id: int = Field(gt=0)

    hero_image: str = Field(min_length=1)
    thumbnail: str = Field(min_length=1)

    start_date: datetime
    end_date: datetime

    pricing: float = Field(ge=0)
    external_ticket_link: Optional[AnyHttpUrl] = None
    facilities: List[str] = Field(default_factory=list)
    sponsored: bool = False
    active: bool = True

    recurrence: Optional[RecurrenceIn] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def _dates_utc(cls, v: datetime) -> datetime:
        return utc_field(v, "event date")

    @field_validator("slug")
    @classmethod
    def _slug_lower(cls, v: I18nValue) -> I18nValue:
        return v.lower()

    @model_validator(mode="after")
    def _end_after_start(self) -> "EventIn":
        if self.end_date < self.start_date:
            raise ValueError("endDate must be greater than or equal to startDate")
        return self
