"""
Deterministic per-occurrence identifiers.

id = uuid5(OCCURRENCE_NAMESPACE, f"{source_id}{SEPARATOR}{instant as ISO-8601 UTC}")

Re-syncing the same occurrence always yields the same id, so index writes
overwrite instead of duplicating.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

from services.errors import InvalidArgumentError
from util.time import TimePolicyError, parse_instant, to_iso_z


# Versioned protocol constant. Changing it changes every occurrence id, so it
# cannot be rotated without deleting and re-syncing every event document.
OCCURRENCE_NAMESPACE = uuid.UUID("6f1c2d7e-4b8a-5c39-9e21-3a7d0b5f8c14")

SEPARATOR = "|"


def generate_occurrence_id(source_id: str | int, occurrence_instant: datetime | date | str) -> str:
    """
    Raises InvalidArgumentError for an empty source id or an instant that is
    not a valid timezone-aware point in time.
    """
    sid = str(source_id).strip() if source_id is not None else ""
    if not sid:
        raise InvalidArgumentError("sourceId must be non-empty")

    try:
        instant = parse_instant(occurrence_instant, "occurrenceInstant")
    except TimePolicyError as e:
        raise InvalidArgumentError(str(e)) from e

    return str(uuid.uuid5(OCCURRENCE_NAMESPACE, f"{sid}{SEPARATOR}{to_iso_z(instant)}"))
