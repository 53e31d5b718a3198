# app/router/maintenance/calibration_router.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.core.auth import allow_full_access, validate_current_token
from shared.core.database import get_asset_db, get_maintenance_db as get_db
from shared.core.schemas import JsonOutResult, UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.maintenance import calibration_crud as crud
from ...schemas.maintenance.calibration_schemas import (
    CalibrationComplete,
    CalibrationCreate,
    CalibrationListResponse,
    CalibrationOut,
    CalibrationRequest,
    CalibrationSchedule,
)

router = APIRouter(prefix="/api/calibrations", tags=["calibrations"],
                   dependencies=[Depends(validate_current_token)])


@router.get("/", response_model=JsonOutResult[CalibrationListResponse])
def get_calibrations(
    params: CalibrationRequest = Depends(),
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
):
    return success_response(data=crud.get_calibrations(db, asset_db, params))


@router.post("/", response_model=JsonOutResult[CalibrationOut])
def create_calibration(
    request: CalibrationCreate,
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
    current_user: UserToken = Depends(validate_current_token),
):
    if not request.performed_by:
        request.performed_by = current_user.user_id
    return success_response(
        data=crud.create_calibration(db, asset_db, request),
        message="Calibration recorded",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY,
    )


@router.post("/schedule", response_model=JsonOutResult[CalibrationOut])
def schedule_calibration(
    request: CalibrationSchedule,
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
):
    return success_response(
        data=crud.schedule_calibration(db, asset_db, request),
        message="Calibration scheduled",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY,
    )


@router.get("/upcoming", response_model=JsonOutResult[List[CalibrationOut]])
def get_upcoming_calibrations(
    days: int = Query(30, ge=0),
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
):
    return success_response(data=crud.get_upcoming_calibrations(db, asset_db, days))


@router.get("/overdue", response_model=JsonOutResult[List[CalibrationOut]])
def get_overdue_calibrations(
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
):
    return success_response(data=crud.get_overdue_calibrations(db, asset_db))


@router.post("/mark-overdue", response_model=JsonOutResult[int])
def mark_overdue_calibrations(
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_full_access),
):
    return success_response(
        data=crud.mark_overdue_calibrations(db),
        message="Overdue calibrations updated",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )


@router.get("/{calibration_id}", response_model=JsonOutResult[CalibrationOut])
def get_calibration(
    calibration_id: str,
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
):
    return success_response(data=crud.get_calibration(db, asset_db, calibration_id))


@router.post("/{calibration_id}/complete", response_model=JsonOutResult[CalibrationOut])
def complete_calibration(
    calibration_id: str,
    request: CalibrationComplete,
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
    current_user: UserToken = Depends(validate_current_token),
):
    if not request.performed_by:
        request.performed_by = current_user.user_id
    return success_response(
        data=crud.complete_calibration(db, asset_db, calibration_id, request),
        message="Calibration completed",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )
