# app/router/assets/lifecycle_router.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_asset_db as get_db
from shared.core.schemas import JsonOutResult, UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.assets import lifecycle_crud as crud
from ...enum.asset_enum import LifecycleState
from ...schemas.assets.lifecycle_schemas import (
    LifecycleOut,
    LifecycleTransitionRequest,
    LifecycleUpdate,
)

router = APIRouter(prefix="/api/assets", tags=["asset lifecycle"],
                   dependencies=[Depends(validate_current_token)])


@router.get("/{tag}/lifecycle", response_model=JsonOutResult[LifecycleOut])
def get_lifecycle(tag: str, db: Session = Depends(get_db)):
    return success_response(data=crud.get_lifecycle(db, tag))


@router.put("/{tag}/lifecycle", response_model=JsonOutResult[LifecycleOut])
def update_lifecycle(
    tag: str,
    request: LifecycleUpdate,
    db: Session = Depends(get_db),
):
    return success_response(
        data=crud.update_lifecycle(db, tag, request),
        message="Lifecycle updated successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )


@router.post("/{tag}/lifecycle/transition", response_model=JsonOutResult[LifecycleOut])
def transition_lifecycle(
    tag: str,
    request: LifecycleTransitionRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
):
    result = crud.transition_lifecycle_state(
        db, tag, request.target_state,
        performed_by=request.performed_by or current_user.user_id,
    )
    return success_response(
        data=result,
        message=f"Lifecycle state changed to {request.target_state.value}",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )


@router.get("/{tag}/lifecycle/transitions", response_model=JsonOutResult[List[LifecycleState]])
def get_allowed_transitions(tag: str, db: Session = Depends(get_db)):
    return success_response(data=crud.get_allowed_transitions(db, tag))
