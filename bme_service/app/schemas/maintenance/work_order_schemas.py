from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from shared.core.schemas import CommonQueryParams
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.maintenance_enum import WorkOrderStatus
from ..assets.assets_schemas import AssetProjection


class WorkOrderCreate(EmptyStringModel):
    id: Optional[str] = None
    complaint_id: Optional[str] = None
    asset_tag: Optional[str] = None
    assigned_to: Optional[str] = None
    assigned_vendor_id: Optional[str] = None
    status: WorkOrderStatus = WorkOrderStatus.created
    labor_hours: Optional[float] = Field(default=None, ge=0)
    total_cost: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class WorkOrderUpdate(EmptyStringModel):
    assigned_to: Optional[str] = None
    assigned_vendor_id: Optional[str] = None
    status: Optional[WorkOrderStatus] = None
    labor_hours: Optional[float] = Field(default=None, ge=0)
    total_cost: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class WorkOrderOut(BaseModel):
    id: str
    complaint_id: Optional[str] = None
    asset_tag: Optional[str] = None
    assigned_to: Optional[str] = None
    assigned_vendor_id: Optional[str] = None
    status: str
    labor_hours: Optional[float] = None
    total_cost: Optional[float] = None
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    asset: Optional[AssetProjection] = None

    model_config = {"from_attributes": True}


class WorkOrderRequest(CommonQueryParams):
    status: Optional[str] = None
    asset_tag: Optional[str] = None


class WorkOrderListResponse(BaseModel):
    work_orders: List[WorkOrderOut]
    total: int
