from pydantic import BaseModel
from typing import List, Literal, Optional, Union
from datetime import datetime

from shared.core.schemas import CommonQueryParams
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ..assets.assets_schemas import AssetProjection


class PMChecklistItem(BaseModel):
    task: str
    type: Literal["boolean", "text", "number"] = "boolean"
    result: Optional[Union[bool, float, str]] = None
    notes: Optional[str] = None


class PMCreate(EmptyStringModel):
    asset_tag: str
    scheduled_date: datetime
    technician_id: Optional[str] = None
    checklist: List[PMChecklistItem] = []
    notes: Optional[str] = None


class PMComplete(EmptyStringModel):
    completed_date: Optional[datetime] = None
    checklist: Optional[List[PMChecklistItem]] = None
    notes: Optional[str] = None
    performed_by: Optional[str] = None


class PMOut(BaseModel):
    id: str
    asset_tag: str
    scheduled_date: datetime
    completed_date: Optional[datetime] = None
    technician_id: Optional[str] = None
    status: str
    checklist: List[PMChecklistItem] = []
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    asset: Optional[AssetProjection] = None

    model_config = {"from_attributes": True}


class PMRequest(CommonQueryParams):
    status: Optional[str] = None
    asset_tag: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


class PMListResponse(BaseModel):
    pms: List[PMOut]
    total: int
