# schemas/ad.py
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import Field, field_validator, model_validator

from models.ad import AdMenuType
from schemas.common import CamelModel, utc_field
from schemas.i18n import I18nValue


class AdBase(CamelModel):
    id: Optional[int] = Field(default=None, gt=0)
    url: str = Field(min_length=2)
    start_date: datetime
    end_date: datetime
    title: I18nValue
    thumbnail: str = Field(min_length=2)
    pricing: float = Field(default=0, ge=0)
    active: bool = True

    @field_validator("start_date", "end_date")
    @classmethod
    def _dates_utc(cls, v: datetime) -> datetime:
        return utc_field(v, "ad date")

    @model_validator(mode="after")
    def _start_before_end(self):
        if self.start_date > self.end_date:
            raise ValueError("startDate cannot be after endDate")
        return self


class AdCategoryIn(AdBase):
    type: Literal[2]  # AdType.CATEGORY
    category_id: int = Field(gt=0)


class AdMenuIn(AdBase):
    type: Literal[1]  # AdType.MENU
    menu_type: AdMenuType


AdIn = Annotated[Union[AdCategoryIn, AdMenuIn], Field(discriminator="type")]
