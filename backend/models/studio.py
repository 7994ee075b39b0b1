# models/studio.py
from __future__ import annotations

from typing import List

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db import Base
from models.common import ActiveTimestampMixin


class Studio(ActiveTimestampMixin, Base):
    """Studio page. The most recent row is the current one."""

    __tablename__ = "studio"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    body_pt: Mapped[str] = mapped_column(Text, nullable=False)
    body_en: Mapped[str] = mapped_column(Text, nullable=False)
    body_es: Mapped[str] = mapped_column(Text, nullable=False)

    categories: Mapped[List["StudioCategory"]] = relationship(
        back_populates="studio",
        cascade="all, delete-orphan",
        order_by="StudioCategory.id",
    )


class StudioCategory(ActiveTimestampMixin, Base):
    __tablename__ = "studio_category"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    studio_id: Mapped[int] = mapped_column(ForeignKey("studio.id"), nullable=False)

    name_pt: Mapped[str] = mapped_column(String(200), nullable=False)
    name_en: Mapped[str] = mapped_column(String(200), nullable=False)
    name_es: Mapped[str] = mapped_column(String(200), nullable=False)

    studio: Mapped[Studio] = relationship(back_populates="categories")
    medias: Mapped[List["StudioCategoryMedia"]] = relationship(
        back_populates="category",
        cascade="all, delete-orphan",
        order_by="StudioCategoryMedia.id",
    )


class StudioCategoryMedia(ActiveTimestampMixin, Base):
    __tablename__ = "studio_category_media"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    studio_category_id: Mapped[int] = mapped_column(
        ForeignKey("studio_category.id"), nullable=False
    )
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)

    category: Mapped[StudioCategory] = relationship(back_populates="medias")


Index("ix_studio_category_studio_id", StudioCategory.studio_id)
Index("ix_studio_category_media_category_id", StudioCategoryMedia.studio_category_id)
