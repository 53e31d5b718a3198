# app/router/maintenance/pm_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_asset_db, get_maintenance_db as get_db
from shared.core.schemas import JsonOutResult, UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.maintenance import pm_crud as crud
from ...schemas.maintenance.pm_schemas import (
    PMComplete,
    PMCreate,
    PMListResponse,
    PMOut,
    PMRequest,
)

router = APIRouter(prefix="/api/pm", tags=["preventive maintenance"],
                   dependencies=[Depends(validate_current_token)])


@router.get("/", response_model=JsonOutResult[PMListResponse])
def get_pms(
    params: PMRequest = Depends(),
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
):
    return success_response(data=crud.get_pms(db, asset_db, params))


@router.post("/", response_model=JsonOutResult[PMOut])
def schedule_pm(
    pm: PMCreate,
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
):
    return success_response(
        data=crud.schedule_pm(db, asset_db, pm),
        message="Preventive maintenance scheduled",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY,
    )


@router.get("/{pm_id}", response_model=JsonOutResult[PMOut])
def get_pm(
    pm_id: str,
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
):
    return success_response(data=crud.get_pm(db, asset_db, pm_id))


@router.post("/{pm_id}/complete", response_model=JsonOutResult[PMOut])
def complete_pm(
    pm_id: str,
    request: PMComplete,
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
    current_user: UserToken = Depends(validate_current_token),
):
    if not request.performed_by:
        request.performed_by = current_user.user_id
    return success_response(
        data=crud.complete_pm(db, asset_db, pm_id, request),
        message="Preventive maintenance completed",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )
