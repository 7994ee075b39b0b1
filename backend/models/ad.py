# models/ad.py
from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db import Base
from models.common import ActiveTimestampMixin


class AdType(int, enum.Enum):
    MENU = 1
    CATEGORY = 2


class AdMenuType(int, enum.Enum):
    TODAY = 1
    THIS_WEEKEND = 2
    THIS_WEEK = 3
    FEATURED = 4


class Ad(ActiveTimestampMixin, Base):
    __tablename__ = "ad"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ad_type: Mapped[int] = mapped_column(Integer, nullable=False)
    url: Mapped[str] = mapped_column(String(500), nullable=False)

    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    title_pt: Mapped[str] = mapped_column(String(300), nullable=False)
    title_en: Mapped[str] = mapped_column(String(300), nullable=False)
    title_es: Mapped[str] = mapped_column(String(300), nullable=False)

    thumbnail: Mapped[str] = mapped_column(String(500), nullable=False)
    pricing: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    category_detail: Mapped[Optional["AdCategoryDetail"]] = relationship(
        cascade="all, delete-orphan", uselist=False
    )
    menu_detail: Mapped[Optional["AdMenuDetail"]] = relationship(
        cascade="all, delete-orphan", uselist=False
    )


class AdCategoryDetail(ActiveTimestampMixin, Base):
    __tablename__ = "ad_category"

    ad_id: Mapped[int] = mapped_column(ForeignKey("ad.id"), primary_key=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("category.id"), nullable=False)


class AdMenuDetail(ActiveTimestampMixin, Base):
    __tablename__ = "ad_menu"

    ad_id: Mapped[int] = mapped_column(ForeignKey("ad.id"), primary_key=True)
    menu_type: Mapped[int] = mapped_column(Integer, nullable=False)
