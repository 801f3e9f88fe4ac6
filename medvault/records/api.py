# -*- coding: utf-8 -*-
"""Health records — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..identity.security import get_current_principal
from .models import AddRecordRequest, ApiResponse
from .result import to_response
from .service import RecordService

router = APIRouter(prefix="/api/records", tags=["Records"])


def get_record_service(request: Request) -> RecordService:
    return request.app.state.record_service


@router.post("", response_model=ApiResponse, summary="Add a health record for the caller")
def add_record_api(
    request: AddRecordRequest,
    principal: str = Depends(get_current_principal),
    service: RecordService = Depends(get_record_service),
):
    return to_response(service.add_record(principal, request))


@router.get("", response_model=ApiResponse, summary="List my health records")
def get_my_records_api(
    principal: str = Depends(get_current_principal),
    service: RecordService = Depends(get_record_service),
):
    return to_response(service.get_my_records(principal))


@router.get("/count", response_model=int, summary="Number of records owned by the caller")
def get_record_count_api(
    principal: str = Depends(get_current_principal),
    service: RecordService = Depends(get_record_service),
):
    return service.get_record_count(principal)


@router.get("/{record_id}", response_model=ApiResponse, summary="Get one of my records")
def get_record_by_id_api(
    record_id: str,
    principal: str = Depends(get_current_principal),
    service: RecordService = Depends(get_record_service),
):
    return to_response(service.get_record_by_id(principal, record_id))


@router.delete("/{record_id}", response_model=ApiResponse, summary="Delete one of my records")
def delete_record_api(
    record_id: str,
    principal: str = Depends(get_current_principal),
    service: RecordService = Depends(get_record_service),
):
    return to_response(service.delete_record(principal, record_id))
