# app/schemas/assets/assets_schemas.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import date, datetime

from shared.core.schemas import CommonQueryParams
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.asset_enum import AssetCriticality, AssetStatus, LifecycleState


class AssetBase(EmptyStringModel):
    name: str
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    serial_number: Optional[str] = None
    far_number: Optional[str] = None
    department: str
    location: Optional[str] = None
    status: AssetStatus = AssetStatus.active
    asset_type: Optional[str] = None
    modality: Optional[str] = None
    criticality: Optional[AssetCriticality] = None
    oem: Optional[str] = None
    is_minor_asset: bool = False
    lifecycle_state: LifecycleState = LifecycleState.active
    total_downtime_hours: Optional[float] = Field(default=0, ge=0)
    total_service_cost: Optional[float] = Field(default=0, ge=0)
    utilization_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    purchase_date: Optional[date] = None
    installation_date: Optional[date] = None
    commissioning_date: Optional[date] = None
    next_pm_date: Optional[date] = None
    next_calibration_date: Optional[date] = None
    warranty_expiry: Optional[date] = None
    amc_expiry: Optional[date] = None
    value: Optional[float] = None
    image_url: Optional[str] = None
    specifications: Optional[Dict[str, Any]] = None


class AssetCreate(AssetBase):
    tag: Optional[str] = None


class AssetUpdate(EmptyStringModel):
    name: Optional[str] = None
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    serial_number: Optional[str] = None
    far_number: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    status: Optional[AssetStatus] = None
    asset_type: Optional[str] = None
    modality: Optional[str] = None
    criticality: Optional[AssetCriticality] = None
    oem: Optional[str] = None
    is_minor_asset: Optional[bool] = None
    lifecycle_state: Optional[LifecycleState] = None
    total_downtime_hours: Optional[float] = Field(default=None, ge=0)
    total_service_cost: Optional[float] = Field(default=None, ge=0)
    utilization_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    purchase_date: Optional[date] = None
    installation_date: Optional[date] = None
    commissioning_date: Optional[date] = None
    next_pm_date: Optional[date] = None
    next_calibration_date: Optional[date] = None
    warranty_expiry: Optional[date] = None
    amc_expiry: Optional[date] = None
    value: Optional[float] = None
    image_url: Optional[str] = None
    specifications: Optional[Dict[str, Any]] = None
    performed_by: Optional[str] = None


class AssetOut(BaseModel):
    id: str
    tag: str
    name: str
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    serial_number: Optional[str] = None
    far_number: Optional[str] = None
    department: str
    location: Optional[str] = None
    status: str
    asset_type: Optional[str] = None
    modality: Optional[str] = None
    criticality: Optional[str] = None
    oem: Optional[str] = None
    is_minor_asset: bool = False
    lifecycle_state: str
    age_years: Optional[float] = None
    total_downtime_hours: Optional[float] = None
    total_service_cost: Optional[float] = None
    utilization_percentage: Optional[float] = None
    replacement_recommended: bool = False
    replacement_reason: Optional[str] = None
    purchase_date: Optional[date] = None
    installation_date: Optional[date] = None
    commissioning_date: Optional[date] = None
    next_pm_date: Optional[date] = None
    next_calibration_date: Optional[date] = None
    warranty_expiry: Optional[date] = None
    amc_expiry: Optional[date] = None
    value: Optional[float] = None
    image_url: Optional[str] = None
    specifications: Optional[Dict[str, Any]] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AssetsRequest(CommonQueryParams):
    department: Optional[str] = None
    status: Optional[str] = None
    lifecycle_state: Optional[str] = None
    criticality: Optional[str] = None
    replacement_recommended: Optional[bool] = None


class AssetListResponse(BaseModel):
    assets: List[AssetOut]
    total: int

    model_config = {"from_attributes": True}


class AssetProjection(BaseModel):
    """Read-only slice of an asset merged into maintenance-store records."""
    tag: str
    name: str
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = None

    model_config = {"from_attributes": True}


class AssetMoveRequest(EmptyStringModel):
    to_location: Optional[str] = None
    to_department: Optional[str] = None
    reason: Optional[str] = None
    moved_by: Optional[str] = None


class QRAction(BaseModel):
    label: str
    url: str


class QRDetailsOut(BaseModel):
    url: str
    asset: AssetProjection
    actions: List[QRAction]


class BulkUploadRowError(BaseModel):
    row: int
    data: Dict[str, Any]
    errors: List[str]


class BulkUploadResult(BaseModel):
    total: int
    successful: int
    failed: int
    duplicates: int
    errors: List[BulkUploadRowError]


class SerialCleanupResult(BaseModel):
    serial_numbers_cleared: int
    far_numbers_cleared: int
