# app/router/procurement/contracts_router.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.core.auth import allow_full_access, validate_current_token
from shared.core.database import get_asset_db as get_db
from shared.core.schemas import JsonOutResult, UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.procurement import contracts_crud as crud
from ...schemas.procurement.contracts_schemas import (
    ContractCreate,
    ContractListResponse,
    ContractOut,
    ContractRequest,
    ContractUpdate,
    RenewalReminderResult,
)

router = APIRouter(prefix="/api/contracts", tags=["contracts"],
                   dependencies=[Depends(validate_current_token)])


@router.get("/", response_model=JsonOutResult[ContractListResponse])
def get_contracts(
    params: ContractRequest = Depends(),
    db: Session = Depends(get_db),
):
    return success_response(data=crud.get_contracts(db, params))


@router.get("/expiring", response_model=JsonOutResult[List[ContractOut]])
def get_expiring_contracts(
    days: int = Query(30, ge=0),
    db: Session = Depends(get_db),
):
    return success_response(data=crud.get_expiring_contracts(db, days))


@router.post("/renewal-reminders", response_model=JsonOutResult[RenewalReminderResult])
def send_renewal_reminders(
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_full_access),
):
    return success_response(
        data=crud.get_renewal_reminders(db),
        message="Renewal reminders generated",
    )


@router.post("/", response_model=JsonOutResult[ContractOut])
def create_contract(
    contract: ContractCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_full_access),
):
    return success_response(
        data=crud.create_contract(db, contract, created_by=current_user.user_id),
        message="Contract created successfully",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY,
    )


@router.get("/{contract_id}", response_model=JsonOutResult[ContractOut])
def get_contract(contract_id: str, db: Session = Depends(get_db)):
    return success_response(data=crud.get_contract(db, contract_id))


@router.put("/{contract_id}", response_model=JsonOutResult[ContractOut])
def update_contract(
    contract_id: str,
    contract: ContractUpdate,
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_full_access),
):
    return success_response(
        data=crud.update_contract(db, contract_id, contract),
        message="Contract updated successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )


@router.delete("/{contract_id}", response_model=JsonOutResult[None])
def delete_contract(
    contract_id: str,
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_full_access),
):
    crud.delete_contract(db, contract_id)
    return success_response(
        data=None,
        message="Contract deleted successfully",
        status_code=AppStatusCode.DELETED_SUCCESSFULLY,
    )
