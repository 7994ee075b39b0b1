# models/page.py
from __future__ import annotations

import enum

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db import Base
from models.common import ActiveTimestampMixin


class PageKind(str, enum.Enum):
    ABOUT = "about"
    CONTACT = "contact"
    ADVERTISEMENT = "advertisement"


class InstitutionalPage(ActiveTimestampMixin, Base):
    """Localized body text for a fixed site page; latest row per kind wins."""

    __tablename__ = "institutional_page"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    kind: Mapped[str] = mapped_column(String(32), nullable=False)

    body_pt: Mapped[str] = mapped_column(Text, nullable=False)
    body_en: Mapped[str] = mapped_column(Text, nullable=False)
    body_es: Mapped[str] = mapped_column(Text, nullable=False)


Index("ix_institutional_page_kind", InstitutionalPage.kind)
