# -*- coding: utf-8 -*-
"""Tagged operation results, converted to ``ApiResponse`` at the HTTP edge."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Union

from .models import ApiResponse, HealthRecord


@dataclass(frozen=True)
class Ok:
    message: str
    data: Optional[List[HealthRecord]] = None


@dataclass(frozen=True)
class Err:
    message: str


Result = Union[Ok, Err]


def to_response(result: Result) -> ApiResponse:
    if isinstance(result, Ok):
        return ApiResponse(success=True, message=result.message, data=result.data)
    return ApiResponse(success=False, message=result.message, data=None)
