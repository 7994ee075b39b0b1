# services/studio_repo.py
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from models.studio import Studio, StudioCategory, StudioCategoryMedia
from schemas.i18n import i18n_columns, i18n_from_row
from schemas.studio import StudioIn
from services.errors import NotFoundError
from services.repo_common import run_mutation, store_read
from util.time import from_db_utc, to_iso_z, utcnow


ENTITY = "studio"


def _latest_query():
    return (
        select(Studio)
        .options(selectinload(Studio.categories).selectinload(StudioCategory.medias))
        .order_by(Studio.id.desc())
        .limit(1)
    )


def get_studio(db: Session) -> Optional[Studio]:
    """The current studio page, or None before the first insert."""
    with store_read(action="get", entity=ENTITY):
        return db.execute(_latest_query()).scalars().one_or_none()


def _categories(payload: StudioIn, now) -> list[StudioCategory]:
    return [
        StudioCategory(
            **i18n_columns("name", c.name),
            created_at=now,
            updated_at=now,
            medias=[
                StudioCategoryMedia(file_path=path, created_at=now, updated_at=now)
                for path in c.medias
            ],
        )
        for c in payload.categories
    ]


def insert_studio(db: Session, payload: StudioIn) -> Optional[int]:
    """Studio, categories and medias in one transaction."""

    def _do(s: Session) -> int:
        now = utcnow()
        row = Studio(**i18n_columns("body", payload.body), created_at=now, updated_at=now)
        row.categories = _categories(payload, now)
        s.add(row)
        s.flush()
        return row.id

    return run_mutation(db, _do, action="insert", entity=ENTITY)


def update_studio(db: Session, payload: StudioIn) -> bool:
    """Rewrites the current studio; categories and medias are replaced wholesale."""

    def _do(s: Session) -> bool:
        row = s.execute(_latest_query()).scalars().one_or_none()
        if row is None:
            raise NotFoundError(ENTITY, "current")
        now = utcnow()
        for k, v in i18n_columns("body", payload.body).items():
            setattr(row, k, v)
        row.updated_at = now
        row.categories = _categories(payload, now)
        return True

    return bool(run_mutation(db, _do, action="update", entity=ENTITY))


def studio_to_dict(row: Studio) -> dict[str, Any]:
    return {
        "id": row.id,
        "body": i18n_from_row(row, "body"),
        "categories": [
            {"name": i18n_from_row(c, "name"), "medias": [m.file_path for m in c.medias]}
            for c in row.categories
        ],
        "updatedAt": to_iso_z(from_db_utc(row.updated_at)),
    }
