# schemas/response.py
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel


class ApiResponse(BaseModel):
    success: bool
    data: Any = None
    errors: Optional[List[str]] = None


def ok(data: Any) -> dict:
    return {"success": True, "data": data}


def fail(errors: List[str] | str) -> dict:
    if isinstance(errors, str):
        errors = [errors]
    return {"success": False, "errors": list(errors)}
