# schemas/company.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from schemas.common import CamelModel


class AddressIn(CamelModel):
    street: str = Field(min_length=2)
    number: Optional[str] = None
    complement: Optional[str] = None
    district: Optional[str] = None
    city: str = Field(min_length=2)
    state: str = Field(min_length=2)
    state_full: Optional[str] = None
    postal_code: Optional[str] = None
    country: str = Field(min_length=2)
    country_code: str = Field(min_length=2, max_length=2)


class GeoIn(BaseModel):
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)


class CompanyIn(CamelModel):
    id: Optional[int] = Field(default=None, gt=0)
    name: str = Field(min_length=2)
    slug: str = Field(min_length=2)
    address: AddressIn
    location_id: int = Field(gt=0)
    geo: GeoIn = Field(default_factory=GeoIn)
    active: bool = True
