# schemas/location.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from schemas.common import CamelModel


class DistrictIn(BaseModel):
    district: str = Field(min_length=2)
    slug: str = Field(min_length=2)


class LocationIn(CamelModel):
    id: Optional[int] = Field(default=None, gt=0)
    city: str = Field(min_length=2)
    city_slug: str = Field(min_length=2)
    state: str = ""
    country: str = ""
    description: str = ""
    districts: List[DistrictIn] = Field(default_factory=list)
    active: bool = True
