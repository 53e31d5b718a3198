# app/router/procurement/vendors_router.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_full_access, validate_current_token
from shared.core.database import get_asset_db as get_db
from shared.core.schemas import JsonOutResult, UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.procurement import vendors_crud as crud
from ...schemas.procurement.contracts_schemas import ContractOut
from ...schemas.procurement.vendors_schemas import (
    VendorCreate,
    VendorListResponse,
    VendorOut,
    VendorPerformance,
    VendorRequest,
    VendorUpdate,
)

router = APIRouter(prefix="/api/vendors", tags=["vendors"],
                   dependencies=[Depends(validate_current_token)])


@router.get("/", response_model=JsonOutResult[VendorListResponse])
def get_vendors(
    params: VendorRequest = Depends(),
    db: Session = Depends(get_db),
):
    return success_response(data=crud.get_vendors(db, params))


@router.post("/", response_model=JsonOutResult[VendorOut])
def create_vendor(
    vendor: VendorCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_full_access),
):
    return success_response(
        data=crud.create_vendor(db, vendor, created_by=current_user.user_id),
        message="Vendor registered successfully",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY,
    )


@router.get("/{vendor_id}", response_model=JsonOutResult[VendorOut])
def get_vendor(vendor_id: str, db: Session = Depends(get_db)):
    return success_response(data=crud.get_vendor(db, vendor_id))


@router.put("/{vendor_id}", response_model=JsonOutResult[VendorOut])
def update_vendor(
    vendor_id: str,
    vendor: VendorUpdate,
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_full_access),
):
    return success_response(
        data=crud.update_vendor(db, vendor_id, vendor),
        message="Vendor updated successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )


@router.delete("/{vendor_id}", response_model=JsonOutResult[None])
def delete_vendor(
    vendor_id: str,
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_full_access),
):
    crud.delete_vendor(db, vendor_id)
    return success_response(
        data=None,
        message="Vendor deleted successfully",
        status_code=AppStatusCode.DELETED_SUCCESSFULLY,
    )


@router.get("/{vendor_id}/contracts", response_model=JsonOutResult[List[ContractOut]])
def get_vendor_contracts(vendor_id: str, db: Session = Depends(get_db)):
    return success_response(data=crud.get_vendor_contracts(db, vendor_id))


@router.get("/{vendor_id}/performance", response_model=JsonOutResult[VendorPerformance])
def get_vendor_performance(vendor_id: str, db: Session = Depends(get_db)):
    return success_response(data=crud.get_vendor_performance(db, vendor_id))
