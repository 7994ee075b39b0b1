# schemas/page.py
from __future__ import annotations

from schemas.common import CamelModel
from schemas.i18n import I18nValue


class PageIn(CamelModel):
    body: I18nValue
