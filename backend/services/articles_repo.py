# services/articles_repo.py
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from models.article import Article
from schemas.article import ArticleIn
from schemas.i18n import i18n_columns, i18n_from_row
from services.errors import NotFoundError, ValidationError
from services.repo_common import (
    DEFAULT_MAX_TAKE,
    like_filter,
    normalize_page,
    require_positive_id,
    run_mutation,
    store_read,
)
from util.time import from_db_utc, to_iso_z, utcnow


ENTITY = "article"


def get_article(db: Session, article_id: Any) -> Optional[Article]:
    aid = require_positive_id(article_id)
    with store_read(action="get", entity=ENTITY):
        return db.get(Article, aid)


def list_articles(
    db: Session,
    *,
    skip: int = 0,
    take: int = 10,
    name: Optional[str] = None,
    case_sensitive: bool = False,
    max_take: int = DEFAULT_MAX_TAKE,
) -> list[dict[str, Any]]:
    skip, take = normalize_page(skip, take, max_take)
    q = select(Article)
    if name and name.strip():
        term = name.strip()
        q = q.where(
            or_(
                like_filter(Article.title_pt, term, case_sensitive),
                like_filter(Article.title_en, term, case_sensitive),
                like_filter(Article.title_es, term, case_sensitive),
            )
        )
    q = q.order_by(Article.publication_date.desc(), Article.id.desc()).offset(skip).limit(take)
    with store_read(action="list", entity=ENTITY):
        rows = db.execute(q).scalars().all()
    return [article_list_item(r) for r in rows]


def list_article_ids(db: Session) -> list[int]:
    with store_read(action="list_ids", entity=ENTITY):
        return list(db.execute(select(Article.id).order_by(Article.id)).scalars().all())


def _apply(row: Article, payload: ArticleIn, now) -> None:
    for k, v in {
        **i18n_columns("title", payload.title),
        **i18n_columns("slug", payload.slug),
        **i18n_columns("body", payload.body),
    }.items():
        setattr(row, k, v)
    row.hero_image = payload.hero_image
    row.thumbnail = payload.thumbnail
    row.publication_date = payload.publication_date
    row.active = payload.active
    row.updated_at = now


def insert_article(db: Session, payload: ArticleIn) -> Optional[int]:
    def _do(s: Session) -> int:
        now = utcnow()
        row = Article(created_at=now)
        _apply(row, payload, now)
        s.add(row)
        s.flush()
        return row.id

    return run_mutation(db, _do, action="insert", entity=ENTITY)


def update_article(db: Session, payload: ArticleIn) -> bool:
    if payload.id is None:
        raise ValidationError("`id` must be provided for update")
    article_id = payload.id

    def _do(s: Session) -> bool:
        row = s.get(Article, article_id)
        if row is None:
            raise NotFoundError(ENTITY, article_id)
        _apply(row, payload, utcnow())
        return True

    return bool(run_mutation(db, _do, action="update", entity=ENTITY, entity_id=article_id))


def set_article_active(db: Session, article_id: Any, active: bool) -> bool:
    aid = require_positive_id(article_id)

    def _do(s: Session) -> bool:
        row = s.get(Article, aid)
        if row is None:
            raise NotFoundError(ENTITY, aid)
        row.active = bool(active)
        row.updated_at = utcnow()
        return True

    return bool(run_mutation(db, _do, action="toggle_active", entity=ENTITY, entity_id=aid))


def article_list_item(row: Article) -> dict[str, Any]:
    return {
        "id": row.id,
        "title": i18n_from_row(row, "title"),
        "slug": i18n_from_row(row, "slug"),
        "publicationDate": to_iso_z(from_db_utc(row.publication_date)),
        "active": row.active,
    }


def article_to_dict(row: Article) -> dict[str, Any]:
    return {
        **article_list_item(row),
        "body": i18n_from_row(row, "body"),
        "heroImage": row.hero_image,
        "thumbnail": row.thumbnail,
        "createdAt": to_iso_z(from_db_utc(row.created_at)),
        "updatedAt": to_iso_z(from_db_utc(row.updated_at)),
    }
