# models/category.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db import Base
from models.common import ActiveTimestampMixin


class Category(ActiveTimestampMixin, Base):
    __tablename__ = "category"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    name_pt: Mapped[str] = mapped_column(String(200), nullable=False)
    name_en: Mapped[str] = mapped_column(String(200), nullable=False)
    name_es: Mapped[str] = mapped_column(String(200), nullable=False)

    slug_pt: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    slug_en: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    slug_es: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)

    # Either all three are set or none.
    description_pt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description_en: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description_es: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    parent_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("category.id"), nullable=True
    )


Index("ix_category_parent_id", Category.parent_id)
