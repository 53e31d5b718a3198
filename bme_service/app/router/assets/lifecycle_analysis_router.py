# app/router/assets/lifecycle_analysis_router.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.core.auth import allow_full_access, validate_current_token
from shared.core.database import get_asset_db as get_db
from shared.core.schemas import JsonOutResult, UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.assets import lifecycle_analysis as crud
from ...schemas.assets.assets_schemas import AssetOut
from ...schemas.assets.lifecycle_schemas import (
    ApplyRecommendationsResult,
    EndOfLifeNotification,
    ReplacementRecommendationOut,
    ReplacementThresholds,
)

router = APIRouter(prefix="/api/assets/lifecycle-analysis", tags=["lifecycle analysis"],
                   dependencies=[Depends(validate_current_token)])


@router.get("/recommendations", response_model=JsonOutResult[List[ReplacementRecommendationOut]])
def get_recommendations(
    thresholds: ReplacementThresholds = Depends(),
    db: Session = Depends(get_db),
):
    return success_response(data=crud.get_replacement_recommendations(db, thresholds))


@router.post("/recommendations/apply", response_model=JsonOutResult[ApplyRecommendationsResult])
def apply_recommendations(
    thresholds: ReplacementThresholds = Depends(),
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_full_access),
):
    return success_response(
        data=crud.apply_replacement_flags(db, thresholds),
        message="Replacement recommendations applied",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )


@router.get("/end-of-life", response_model=JsonOutResult[List[AssetOut]])
def get_end_of_life_assets(
    threshold_years: int = Query(5, ge=1),
    db: Session = Depends(get_db),
):
    assets = crud.get_assets_nearing_end_of_life(db, threshold_years)
    return success_response(data=[AssetOut.model_validate(a) for a in assets])


@router.get("/end-of-life/notifications", response_model=JsonOutResult[List[EndOfLifeNotification]])
def get_end_of_life_notifications(
    threshold_years: int = Query(5, ge=1),
    db: Session = Depends(get_db),
):
    return success_response(data=crud.get_end_of_life_notifications(db, threshold_years))
