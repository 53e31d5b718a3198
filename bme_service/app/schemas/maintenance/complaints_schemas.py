from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from shared.core.schemas import CommonQueryParams
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.maintenance_enum import ComplaintPriority, ComplaintStatus
from ..assets.assets_schemas import AssetProjection


class ComplaintCreate(EmptyStringModel):
    id: Optional[str] = None
    asset_tag: Optional[str] = None
    title: str
    description: Optional[str] = None
    priority: ComplaintPriority = ComplaintPriority.medium
    reported_by: Optional[str] = None
    assigned_to: Optional[str] = None


class ComplaintUpdate(EmptyStringModel):
    status: Optional[ComplaintStatus] = None
    priority: Optional[ComplaintPriority] = None
    assigned_to: Optional[str] = None
    root_cause: Optional[str] = None
    resolution: Optional[str] = None
    downtime_minutes: Optional[int] = Field(default=None, ge=0)
    responded_at: Optional[datetime] = None


class ComplaintOut(BaseModel):
    id: str
    asset_tag: Optional[str] = None
    title: str
    description: Optional[str] = None
    priority: str
    status: str
    reported_by: Optional[str] = None
    assigned_to: Optional[str] = None
    reported_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    sla_deadline: Optional[datetime] = None
    downtime_minutes: Optional[int] = None
    root_cause: Optional[str] = None
    resolution: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    asset: Optional[AssetProjection] = None

    model_config = {"from_attributes": True}


class ComplaintRequest(CommonQueryParams):
    status: Optional[str] = None
    priority: Optional[str] = None
    asset_tag: Optional[str] = None
    reported_by: Optional[str] = None
    assigned_to: Optional[str] = None


class ComplaintListResponse(BaseModel):
    complaints: List[ComplaintOut]
    total: int
