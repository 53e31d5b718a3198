# app/router/assets/asset_history_router.py
from typing import Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_asset_db as get_db
from shared.core.schemas import JsonOutResult, UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.assets import asset_history_crud as crud
from ...schemas.assets.asset_history_schemas import (
    AssetHistoryCreate,
    AssetHistoryOut,
    AssetHistoryRequest,
    HistoryStatsOut,
    HistoryTimelineEntry,
)

router = APIRouter(prefix="/api/assets", tags=["asset history"],
                   dependencies=[Depends(validate_current_token)])


@router.get("/{tag}/history", response_model=JsonOutResult[List[AssetHistoryOut]])
def get_asset_history(
    tag: str,
    params: AssetHistoryRequest = Depends(),
    db: Session = Depends(get_db),
):
    return success_response(data=crud.get_asset_history(db, tag, params))


@router.post("/{tag}/history", response_model=JsonOutResult[AssetHistoryOut])
def create_asset_history(
    tag: str,
    event: AssetHistoryCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
):
    entry = crud.create_asset_history(
        db, tag, event.event_type,
        description=event.description,
        performed_by=event.performed_by or current_user.user_id,
        old_value=event.old_value,
        new_value=event.new_value,
        metadata=event.metadata,
        event_date=event.event_date,
    )
    return success_response(
        data=AssetHistoryOut.model_validate(entry),
        message="History event recorded",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY,
    )


@router.get("/{tag}/history/by-type", response_model=JsonOutResult[Dict[str, List[AssetHistoryOut]]])
def get_asset_history_by_type(tag: str, db: Session = Depends(get_db)):
    return success_response(data=crud.get_asset_history_by_type(db, tag))


@router.get("/{tag}/history/timeline", response_model=JsonOutResult[List[HistoryTimelineEntry]])
def get_asset_history_timeline(tag: str, db: Session = Depends(get_db)):
    return success_response(data=crud.get_asset_history_timeline(db, tag))


@router.get("/{tag}/history/stats", response_model=JsonOutResult[HistoryStatsOut])
def get_asset_history_stats(tag: str, db: Session = Depends(get_db)):
    return success_response(data=crud.get_asset_history_stats(db, tag))
