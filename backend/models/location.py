# models/location.py
from __future__ import annotations

from typing import List

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db import Base
from models.common import ActiveTimestampMixin


class Location(ActiveTimestampMixin, Base):
    __tablename__ = "location"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    city: Mapped[str] = mapped_column(String(200), nullable=False)
    city_slug: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    state: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    country: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    districts: Mapped[List["LocationDistrict"]] = relationship(
        back_populates="location",
        cascade="all, delete-orphan",
        order_by="LocationDistrict.id",
    )


class LocationDistrict(ActiveTimestampMixin, Base):
    __tablename__ = "location_district"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    location_id: Mapped[int] = mapped_column(ForeignKey("location.id"), nullable=False)
    district: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False)

    location: Mapped[Location] = relationship(back_populates="districts")


Index("ix_location_district_location_id", LocationDistrict.location_id)
