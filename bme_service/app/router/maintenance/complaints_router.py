# app/router/maintenance/complaints_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_asset_db, get_maintenance_db as get_db
from shared.core.schemas import JsonOutResult, UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.maintenance import complaints_crud as crud
from ...schemas.maintenance.complaints_schemas import (
    ComplaintCreate,
    ComplaintListResponse,
    ComplaintOut,
    ComplaintRequest,
    ComplaintUpdate,
)

router = APIRouter(prefix="/api/complaints", tags=["complaints"],
                   dependencies=[Depends(validate_current_token)])


@router.get("/", response_model=JsonOutResult[ComplaintListResponse])
def get_complaints(
    params: ComplaintRequest = Depends(),
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
):
    return success_response(data=crud.get_complaints(db, asset_db, params))


@router.post("/", response_model=JsonOutResult[ComplaintOut])
def create_complaint(
    complaint: ComplaintCreate,
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
    current_user: UserToken = Depends(validate_current_token),
):
    return success_response(
        data=crud.create_complaint(db, asset_db, complaint,
                                   reported_by=current_user.user_id),
        message="Complaint created successfully",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY,
    )


@router.get("/{complaint_id}", response_model=JsonOutResult[ComplaintOut])
def get_complaint(
    complaint_id: str,
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
):
    return success_response(data=crud.get_complaint(db, asset_db, complaint_id))


@router.put("/{complaint_id}", response_model=JsonOutResult[ComplaintOut])
def update_complaint(
    complaint_id: str,
    complaint: ComplaintUpdate,
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
):
    return success_response(
        data=crud.update_complaint(db, asset_db, complaint_id, complaint),
        message="Complaint updated successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )
