# app/router/assets/utilization_router.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_asset_db as get_db
from shared.core.schemas import JsonOutResult, UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.assets import utilization_crud as crud
from ...enum.asset_enum import UtilizationGrouping
from ...schemas.assets.utilization_schemas import (
    UtilizationCreate,
    UtilizationIssues,
    UtilizationListResponse,
    UtilizationOut,
    UtilizationRequest,
    UtilizationStats,
    UtilizationTrendPoint,
    UtilizationUploadResult,
)

router = APIRouter(prefix="/api/utilization", tags=["utilization"],
                   dependencies=[Depends(validate_current_token)])


@router.get("/", response_model=JsonOutResult[UtilizationListResponse])
def get_utilization_records(
    params: UtilizationRequest = Depends(),
    db: Session = Depends(get_db),
):
    return success_response(data=crud.get_utilization_records(db, params))


@router.post("/", response_model=JsonOutResult[UtilizationOut])
def record_utilization(
    entry: UtilizationCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
):
    if not entry.recorded_by:
        entry.recorded_by = current_user.user_id
    return success_response(
        data=crud.record_utilization(db, entry),
        message="Utilization recorded",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY,
    )


@router.post("/upload", response_model=JsonOutResult[UtilizationUploadResult])
async def upload_utilization(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
):
    content = await file.read()
    return success_response(
        data=crud.upload_utilization_csv(db, content, recorded_by=current_user.user_id),
        message="Utilization upload processed",
    )


@router.get("/stats", response_model=JsonOutResult[UtilizationStats])
def get_utilization_stats(
    asset_tag: str,
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    return success_response(
        data=crud.calculate_utilization_stats(db, asset_tag, date_from, date_to))


@router.get("/trends", response_model=JsonOutResult[List[UtilizationTrendPoint]])
def get_utilization_trends(
    asset_tag: str,
    date_from: date,
    date_to: date,
    group_by: UtilizationGrouping = Query(UtilizationGrouping.day),
    db: Session = Depends(get_db),
):
    return success_response(
        data=crud.get_utilization_trends(db, asset_tag, date_from, date_to, group_by))


@router.get("/issues", response_model=JsonOutResult[UtilizationIssues])
def get_utilization_issues(
    threshold_low: float = Query(20, ge=0, le=100),
    threshold_high: float = Query(80, ge=0, le=100),
    db: Session = Depends(get_db),
):
    return success_response(
        data=crud.identify_utilization_issues(db, threshold_low, threshold_high))
