from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime

from shared.core.schemas import CommonQueryParams
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.asset_enum import UtilizationSource


class UtilizationCreate(EmptyStringModel):
    asset_tag: str
    date: date
    usage_hours: Optional[float] = Field(default=None, ge=0, le=24)
    usage_count: Optional[int] = Field(default=None, ge=0)
    recorded_by: Optional[str] = None
    source: UtilizationSource = UtilizationSource.manual
    notes: Optional[str] = None


class UtilizationOut(BaseModel):
    id: str
    asset_tag: Optional[str] = None
    asset_name: Optional[str] = None
    department: Optional[str] = None
    date: date
    usage_hours: Optional[float] = None
    usage_count: Optional[int] = None
    recorded_by: Optional[str] = None
    source: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class UtilizationRequest(CommonQueryParams):
    asset_tag: Optional[str] = None
    department: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    limit: Optional[int] = 50


class UtilizationListResponse(BaseModel):
    records: List[UtilizationOut]
    total: int


class UtilizationStats(BaseModel):
    asset_tag: str
    asset_name: str
    total_usage_hours: float
    total_usage_count: int
    average_usage_hours: float
    average_usage_count: float
    utilization_percentage: float
    record_count: int
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class UtilizationTrendPoint(BaseModel):
    period: str
    usage_hours: float
    usage_count: int


class UtilizationIssue(BaseModel):
    asset_tag: str
    asset_name: str
    department: str
    utilization_percentage: float
    threshold: float


class UtilizationIssues(BaseModel):
    under_utilized: List[UtilizationIssue]
    over_utilized: List[UtilizationIssue]


class UtilizationUploadResult(BaseModel):
    total: int
    successful: int
    failed: int
    errors: List[dict]
