from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.asset_enum import LifecycleState, Recommendation, ReplacementPriority


class LifecycleOut(BaseModel):
    tag: str
    lifecycle_state: str
    age_years: float
    total_downtime_hours: float
    total_service_cost: float
    utilization_percentage: float
    service_cost_ratio: float
    replacement_recommended: bool
    replacement_reason: Optional[str] = None
    allowed_transitions: List[LifecycleState]


class LifecycleUpdate(EmptyStringModel):
    lifecycle_state: Optional[LifecycleState] = None
    total_downtime_hours: Optional[float] = Field(default=None, ge=0)
    total_service_cost: Optional[float] = Field(default=None, ge=0)
    utilization_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    replacement_recommended: Optional[bool] = None
    replacement_reason: Optional[str] = None
    performed_by: Optional[str] = None


class LifecycleTransitionRequest(EmptyStringModel):
    target_state: LifecycleState
    performed_by: Optional[str] = None


class ReplacementThresholds(BaseModel):
    min_age: float = Field(default=5, gt=0)
    max_service_cost_ratio: float = Field(default=0.5, gt=0)
    min_downtime_hours: float = Field(default=100, gt=0)
    min_utilization: float = Field(default=20, gt=0)


class ReplacementRecommendationOut(BaseModel):
    asset_tag: str
    asset_name: str
    recommendation: Recommendation
    priority: ReplacementPriority
    score: float
    reasons: List[str]
    estimated_replacement_cost: Optional[float] = None
    estimated_replacement_date: Optional[date] = None


class ApplyRecommendationsResult(BaseModel):
    evaluated: int
    flagged_for_replacement: int
    updated_tags: List[str]


class EndOfLifeNotification(BaseModel):
    asset_tag: str
    asset_name: str
    age: float
    message: str
