# app/router/maintenance/work_order_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_asset_db, get_maintenance_db as get_db
from shared.core.schemas import JsonOutResult
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.maintenance import work_order_crud as crud
from ...schemas.maintenance.work_order_schemas import (
    WorkOrderCreate,
    WorkOrderListResponse,
    WorkOrderOut,
    WorkOrderRequest,
    WorkOrderUpdate,
)

router = APIRouter(prefix="/api/work-orders", tags=["work orders"],
                   dependencies=[Depends(validate_current_token)])


@router.get("/", response_model=JsonOutResult[WorkOrderListResponse])
def get_work_orders(
    params: WorkOrderRequest = Depends(),
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
):
    return success_response(data=crud.get_work_orders(db, asset_db, params))


@router.post("/", response_model=JsonOutResult[WorkOrderOut])
def create_work_order(
    work_order: WorkOrderCreate,
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
):
    return success_response(
        data=crud.create_work_order(db, asset_db, work_order),
        message="Work order created successfully",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY,
    )


@router.get("/{work_order_id}", response_model=JsonOutResult[WorkOrderOut])
def get_work_order(
    work_order_id: str,
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
):
    return success_response(data=crud.get_work_order(db, asset_db, work_order_id))


@router.put("/{work_order_id}", response_model=JsonOutResult[WorkOrderOut])
def update_work_order(
    work_order_id: str,
    work_order: WorkOrderUpdate,
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
):
    return success_response(
        data=crud.update_work_order(db, asset_db, work_order_id, work_order),
        message="Work order updated successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )
