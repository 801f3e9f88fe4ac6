# -*- coding: utf-8 -*-
"""Health records — Pydantic models.

Design goals:
- Store only metadata + a pointer (`encrypted_url`) to externally stored, encrypted bytes.
- The owner is the storage partition key and never part of the outward record shape.
- Every listing/mutating operation answers with the same `ApiResponse` envelope.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Numeric columns are SQLite INTEGER (signed 64-bit).
MAX_INT64 = 2**63 - 1


class HealthRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    record_type: str
    date: int = Field(..., ge=0, le=MAX_INT64, description="Logical date of the record (unix seconds)")
    encrypted_url: str = Field(..., description="Opaque pointer to the encrypted document")
    file_size: Optional[int] = Field(None, ge=0, le=MAX_INT64)
    created_at: int = Field(..., description="Insertion time (unix seconds)")


class AddRecordRequest(BaseModel):
    title: str
    record_type: str
    encrypted_url: str
    file_size: Optional[int] = Field(None, ge=0, le=MAX_INT64)
    date: Optional[int] = Field(None, ge=0, le=MAX_INT64, description="Defaults to created_at when omitted")


class ApiResponse(BaseModel):
    success: bool
    message: str
    data: Optional[List[HealthRecord]] = None
