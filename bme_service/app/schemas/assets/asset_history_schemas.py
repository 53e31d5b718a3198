from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.asset_enum import HistoryEventType


class AssetHistoryCreate(EmptyStringModel):
    event_type: HistoryEventType
    description: Optional[str] = None
    performed_by: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    event_date: Optional[datetime] = None


class AssetHistoryOut(BaseModel):
    id: str
    asset_id: str
    event_type: str
    event_date: datetime
    description: Optional[str] = None
    performed_by: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        validation_alias=AliasChoices("event_metadata", "metadata"))
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AssetHistoryRequest(BaseModel):
    event_type: Optional[HistoryEventType] = None
    limit: int = Field(default=100, ge=1, le=1000)
    skip: int = Field(default=0, ge=0)
    sort_by: Literal["event_date", "created_at"] = "event_date"
    sort_order: Literal["asc", "desc"] = "desc"


class HistoryTimelineEntry(BaseModel):
    date: str
    events: List[AssetHistoryOut]


class HistoryStatsOut(BaseModel):
    total_events: int
    events_by_type: Dict[str, int]
    first_event_date: Optional[datetime] = None
    last_event_date: Optional[datetime] = None
