from pydantic import BaseModel
from typing import List, Optional
from datetime import date, datetime

from shared.core.schemas import CommonQueryParams
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.maintenance_enum import CalibrationStatus
from ..assets.assets_schemas import AssetProjection


class CalibrationCreate(EmptyStringModel):
    asset_tag: str
    calibration_date: date
    next_due_date: Optional[date] = None
    vendor_id: Optional[str] = None
    certificate_url: Optional[str] = None
    status: CalibrationStatus = CalibrationStatus.scheduled
    notes: Optional[str] = None
    performed_by: Optional[str] = None


class CalibrationSchedule(EmptyStringModel):
    asset_tag: str
    scheduled_date: date
    vendor_id: Optional[str] = None


class CalibrationComplete(EmptyStringModel):
    completed_date: Optional[date] = None
    certificate_url: Optional[str] = None
    notes: Optional[str] = None
    performed_by: Optional[str] = None


class CalibrationOut(BaseModel):
    id: str
    asset_tag: str
    calibration_date: date
    next_due_date: date
    vendor_id: Optional[str] = None
    certificate_url: Optional[str] = None
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    asset: Optional[AssetProjection] = None

    model_config = {"from_attributes": True}


class CalibrationRequest(CommonQueryParams):
    status: Optional[str] = None
    asset_tag: Optional[str] = None


class CalibrationListResponse(BaseModel):
    calibrations: List[CalibrationOut]
    total: int
