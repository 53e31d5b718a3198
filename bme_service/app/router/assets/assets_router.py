# app/router/assets/assets_router.py
from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from shared.core.auth import allow_full_access, validate_current_token
from shared.core.database import get_asset_db as get_db
from shared.core.schemas import JsonOutResult, UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.assets import assets_crud as crud
from ...schemas.assets.assets_schemas import (
    AssetCreate,
    AssetListResponse,
    AssetMoveRequest,
    AssetOut,
    AssetsRequest,
    AssetUpdate,
    BulkUploadResult,
    QRDetailsOut,
    SerialCleanupResult,
)

router = APIRouter(prefix="/api/assets", tags=["assets"],
                   dependencies=[Depends(validate_current_token)])


@router.get("/", response_model=JsonOutResult[AssetListResponse])
def get_assets(
    params: AssetsRequest = Depends(),
    db: Session = Depends(get_db),
):
    return success_response(data=crud.get_assets(db, params))


@router.post("/", response_model=JsonOutResult[AssetOut])
def create_asset(
    asset: AssetCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
):
    result = crud.create_asset(db, asset, created_by=current_user.user_id)
    return success_response(
        data=AssetOut.model_validate(result),
        message="Asset created successfully",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY,
    )


@router.post("/bulk-upload", response_model=JsonOutResult[BulkUploadResult])
async def bulk_upload_assets(
    file: UploadFile = File(...),
    validate_only: bool = Query(False),
    skip_duplicates: bool = Query(True),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
):
    content = await file.read()
    result = crud.bulk_upload_assets(
        db, content,
        created_by=current_user.user_id,
        validate_only=validate_only,
        skip_duplicates=skip_duplicates,
    )
    return success_response(data=result, message="Bulk upload processed")


@router.post("/cleanup-serial-numbers", response_model=JsonOutResult[SerialCleanupResult])
def cleanup_serial_numbers(
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_full_access),
):
    return success_response(
        data=crud.cleanup_serial_numbers(db),
        message="Serial numbers cleaned up",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )


@router.get("/{tag}", response_model=JsonOutResult[AssetOut])
def get_asset(tag: str, db: Session = Depends(get_db)):
    return success_response(data=crud.get_asset(db, tag))


@router.put("/{tag}", response_model=JsonOutResult[AssetOut])
def update_asset(
    tag: str,
    asset: AssetUpdate,
    db: Session = Depends(get_db),
):
    result = crud.update_asset(db, tag, asset)
    return success_response(
        data=AssetOut.model_validate(result),
        message="Asset updated successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )


@router.delete("/{tag}", response_model=JsonOutResult[None])
def delete_asset(
    tag: str,
    db: Session = Depends(get_db),
    _: UserToken = Depends(allow_full_access),
):
    crud.delete_asset(db, tag)
    return success_response(
        data=None,
        message="Asset deleted successfully",
        status_code=AppStatusCode.DELETED_SUCCESSFULLY,
    )


@router.post("/{tag}/move", response_model=JsonOutResult[AssetOut])
def move_asset(
    tag: str,
    request: AssetMoveRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
):
    if not request.moved_by:
        request.moved_by = current_user.user_id
    result = crud.move_asset(db, tag, request)
    return success_response(
        data=AssetOut.model_validate(result),
        message="Asset moved successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )


@router.get("/{tag}/qr-details", response_model=JsonOutResult[QRDetailsOut])
def get_qr_details(tag: str, db: Session = Depends(get_db)):
    return success_response(data=crud.get_qr_details(db, tag))
