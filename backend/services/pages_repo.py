# services/pages_repo.py
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.page import InstitutionalPage, PageKind
from schemas.i18n import i18n_columns, i18n_from_row
from schemas.page import PageIn
from services.errors import NotFoundError
from services.repo_common import run_mutation, store_read
from util.time import from_db_utc, to_iso_z, utcnow


ENTITY = "page"


def _latest(kind: PageKind):
    return (
        select(InstitutionalPage)
        .where(InstitutionalPage.kind == kind.value)
        .order_by(InstitutionalPage.id.desc())
        .limit(1)
    )


def get_page(db: Session, kind: PageKind) -> Optional[InstitutionalPage]:
    with store_read(action="get", entity=ENTITY):
        return db.execute(_latest(kind)).scalars().one_or_none()


def insert_page(db: Session, kind: PageKind, payload: PageIn) -> Optional[int]:
    def _do(s: Session) -> int:
        now = utcnow()
        row = InstitutionalPage(
            kind=kind.value,
            **i18n_columns("body", payload.body),
            created_at=now,
            updated_at=now,
        )
        s.add(row)
        s.flush()
        return row.id

    return run_mutation(db, _do, action="insert", entity=f"{ENTITY}:{kind.value}")


def update_page(db: Session, kind: PageKind, payload: PageIn) -> bool:
    """Rewrites the latest row of this kind; False when there is none yet."""

    def _do(s: Session) -> bool:
        row = s.execute(_latest(kind)).scalars().one_or_none()
        if row is None:
            raise NotFoundError(ENTITY, kind.value)
        for k, v in i18n_columns("body", payload.body).items():
            setattr(row, k, v)
        row.updated_at = utcnow()
        return True

    return bool(run_mutation(db, _do, action="update", entity=f"{ENTITY}:{kind.value}"))


def page_to_dict(row: InstitutionalPage) -> dict[str, Any]:
    return {
        "kind": row.kind,
        "body": i18n_from_row(row, "body"),
        "updatedAt": to_iso_z(from_db_utc(row.updated_at)),
    }
