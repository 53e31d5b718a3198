# app/router/common/export_router.py
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_asset_db, get_maintenance_db as get_db
from shared.core.schemas import ExportRequestParams, ExportResponse, JsonOutResult
from shared.helpers.json_response_helper import success_response
from ...crud.common import export_crud as crud

router = APIRouter(
    prefix="/api/export",
    tags=["Export"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/", response_model=JsonOutResult[ExportResponse])
def get_export_data(
        type: str,
        params: ExportRequestParams = Depends(),
        db: Session = Depends(get_db),
        asset_db: Session = Depends(get_asset_db)):
    return success_response(data=crud.get_export_data(asset_db, db, type, params))


@router.get(
    "/file",
    response_class=StreamingResponse,
    responses={
        200: {
            "content": {
                "text/csv": {},
                "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": {}
            },
            "description": "CSV or Excel file download",
        }
    },
)
def get_export_file(
        type: str,
        params: ExportRequestParams = Depends(),
        db: Session = Depends(get_db),
        asset_db: Session = Depends(get_asset_db)):
    return crud.get_export_file(asset_db, db, type, params)
