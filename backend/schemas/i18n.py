# schemas/i18n.py
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, field_validator, model_validator

LOCALES = ("pt", "en", "es")
MIN_LENGTH = 2


class I18nValue(BaseModel):
    """A field localized in every supported locale."""

    pt: str
    en: str
    es: str

    @field_validator("pt", "en", "es")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v = (v or "").strip()
        if len(v) < MIN_LENGTH:
            raise ValueError(f"must have at least {MIN_LENGTH} characters")
        return v

    def lower(self) -> "I18nValue":
        return I18nValue(pt=self.pt.lower(), en=self.en.lower(), es=self.es.lower())

    def as_dict(self) -> dict[str, str]:
        return {"pt": self.pt, "en": self.en, "es": self.es}


class OptionalI18nValue(BaseModel):
    """Either fully localized or entirely absent; never partially filled."""

    pt: Optional[str] = None
    en: Optional[str] = None
    es: Optional[str] = None

    @model_validator(mode="after")
    def _all_or_nothing(self) -> "OptionalI18nValue":
        values = [(getattr(self, k) or "").strip() for k in LOCALES]
        filled = [v for v in values if v]
        if not filled:
            self.pt = self.en = self.es = None
            return self
        if len(filled) != len(LOCALES) or any(len(v) < MIN_LENGTH for v in values):
            raise ValueError(
                f"must be set in all of {', '.join(LOCALES)} (min {MIN_LENGTH} characters) or left empty"
            )
        self.pt, self.en, self.es = values
        return self

    def is_empty(self) -> bool:
        return self.pt is None

    def as_dict(self) -> dict[str, str] | None:
        if self.is_empty():
            return None
        return {"pt": self.pt, "en": self.en, "es": self.es}


def i18n_columns(prefix: str, value: I18nValue | OptionalI18nValue | None) -> dict[str, Any]:
    """I18nValue -> {"<prefix>_pt": ..., "<prefix>_en": ..., "<prefix>_es": ...}"""
    return {f"{prefix}_{loc}": (getattr(value, loc) if value is not None else None) for loc in LOCALES}


def i18n_from_row(row: Any, prefix: str) -> dict[str, str] | None:
    values = {loc: getattr(row, f"{prefix}_{loc}") for loc in LOCALES}
    if all(v is None for v in values.values()):
        return None
    return values
