# models/article.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db import Base
from models.common import ActiveTimestampMixin


class Article(ActiveTimestampMixin, Base):
    __tablename__ = "article"

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

    hero_image: Mapped[str] = mapped_column(String(500), nullable=False)
    thumbnail: Mapped[str] = mapped_column(String(500), nullable=False)
    publication_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


Index("ix_article_publication_date", Article.publication_date)
