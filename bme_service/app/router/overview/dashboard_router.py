# app/router/overview/dashboard_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_asset_db, get_maintenance_db as get_db
from shared.core.schemas import JsonOutResult
from shared.helpers.json_response_helper import success_response
from ...crud.overview import dashboard_crud as crud
from ...schemas.overview.dashboard_schema import DashboardMetrics

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"],
                   dependencies=[Depends(validate_current_token)])


@router.get("/metrics", response_model=JsonOutResult[DashboardMetrics])
def get_dashboard_metrics(
    db: Session = Depends(get_db),
    asset_db: Session = Depends(get_asset_db),
):
    return success_response(data=crud.get_dashboard_metrics(db, asset_db))
