# models/event.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db import Base
from models.category import Category
from models.common import ActiveTimestampMixin
from models.company import Company


class Event(ActiveTimestampMixin, Base):
    __tablename__ = "event"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    title_pt: Mapped[str] = mapped_column(String(300), nullable=False)
    title_en: Mapped[str] = mapped_column(String(300), nullable=False)
    title_es: Mapped[str] = mapped_column(String(300), nullable=False)

    slug_pt: Mapped[str] = mapped_column(String(300), nullable=False, unique=True)
    slug_en: Mapped[str] = mapped_column(String(300), nullable=False, unique=True)
    slug_es: Mapped[str] = mapped_column(String(300), nullable=False, unique=True)

    body_pt: Mapped[str] = mapped_column(Text, nullable=False)
    body_en: Mapped[str] = mapped_column(Text, nullable=False)
    body_es: Mapped[str] = mapped_column(Text, nullable=False)

    category_id: Mapped[int] = mapped_column(ForeignKey("category.id"), nullable=False)
    company_id: Mapped[int] = mapped_column(ForeignKey("company.id"), nullable=False)

    hero_image: Mapped[str] = mapped_column(String(500), nullable=False)
    thumbnail: Mapped[str] = mapped_column(String(500), nullable=False)

    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    pricing: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    external_ticket_link: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    facilities: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    sponsored: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    category: Mapped[Category] = relationship()
    company: Mapped[Company] = relationship()
    recurrence: Mapped[Optional["EventRecurrence"]] = relationship(
        back_populates="event",
        cascade="all, delete-orphan",
        uselist=False,
    )


class EventRecurrence(ActiveTimestampMixin, Base):
    __tablename__ = "event_recurrence"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("event.id"), nullable=False, unique=True)

    rrule: Mapped[str] = mapped_column(Text, nullable=False)
    until: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # ISO 8601 strings (UTC, "Z")
    exdates: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    rdates: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    event: Mapped[Event] = relationship(back_populates="recurrence")


Index("ix_event_start_date", Event.start_date)
Index("ix_event_category_id", Event.category_id)
Index("ix_event_company_id", Event.company_id)
