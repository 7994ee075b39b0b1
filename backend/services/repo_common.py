# services/repo_common.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from services.errors import NotFoundError, TransientStoreError, ValidationError
from util.jsonlog import get_logger, log_event


logger = get_logger("store")

T = TypeVar("T")

LIKE_ESCAPE = "\\"
DEFAULT_MAX_TAKE = 500


def require_positive_id(value: Any, field: str = "id") -> int:
    """Accepts a positive int or its decimal string form. Fails before any I/O."""
    if isinstance(value, bool):
        raise ValidationError(f"`{field}` must be a positive integer")
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            raise ValidationError(f"`{field}` must be a positive integer")
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        raise ValidationError(f"`{field}` must be a positive integer")
    return value


def normalize_page(skip: Any, take: Any, max_take: int = DEFAULT_MAX_TAKE) -> tuple[int, int]:
    """
    skip: integer >= 0
    take: integer > 0, clamped to max_take
    """
    errors = []
    if isinstance(skip, bool) or not isinstance(skip, int) or skip < 0:
        errors.append("`skip` must be an integer >= 0")
    if isinstance(take, bool) or not isinstance(take, int) or take <= 0:
        errors.append("`take` must be an integer > 0")
    if errors:
        raise ValidationError(errors)
    return skip, min(take, max_take)


def escape_like(term: str, escape: str = LIKE_ESCAPE) -> str:
    # escape char first, so the escapes added below are not doubled
    return (
        term.replace(escape, escape + escape)
        .replace("%", escape + "%")
        .replace("_", escape + "_")
    )


def like_filter(column, term: str, case_sensitive: bool = False):
    pattern = f"%{escape_like(term)}%"
    if case_sensitive:
        return column.like(pattern, escape=LIKE_ESCAPE)
    return column.ilike(pattern, escape=LIKE_ESCAPE)


def run_mutation(
    db: Session,
    fn: Callable[[Session], T],
    *,
    action: str,
    entity: str,
    entity_id: Optional[int] = None,
) -> Optional[T]:
    """
    Runs fn and commits as one transaction. Any store failure (or a missing
    row signalled by NotFoundError) rolls the whole unit back, is logged, and
    yields None.
    """
    try:
        result = fn(db)
        db.commit()
        return result
    except NotFoundError:
        db.rollback()
        log_event(
            logger,
            level="WARN",
            event="store_mutation_not_found",
            msg=f"{entity} {action} skipped: row not found",
            entity=entity,
            action=action,
            entity_id=entity_id,
        )
        return None
    except SQLAlchemyError as e:
        db.rollback()
        log_event(
            logger,
            level="ERROR",
            event="store_mutation_failed",
            msg=f"{entity} {action} failed",
            entity=entity,
            action=action,
            entity_id=entity_id,
            error=type(e).__name__,
            detail=str(e),
        )
        return None


@contextmanager
def store_read(*, action: str, entity: str) -> Iterator[None]:
    """Read paths re-raise store failures as TransientStoreError."""
    try:
        yield
    except SQLAlchemyError as e:
        log_event(
            logger,
            level="ERROR",
            event="store_read_failed",
            msg=f"{entity} {action} failed",
            entity=entity,
            action=action,
            error=type(e).__name__,
        )
        raise TransientStoreError(f"{entity} {action} failed") from e
