# -*- coding: utf-8 -*-
"""Identity — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..records.service import RecordService
from .security import get_current_principal

router = APIRouter(prefix="/api", tags=["Identity"])


@router.get("/whoami", response_class=PlainTextResponse, summary="Echo the caller principal")
def whoami(principal: str = Depends(get_current_principal)):
    return RecordService.whoami(principal)
