from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from datetime import date, datetime

from shared.core.schemas import CommonQueryParams
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.procurement_enum import ContractExpiryLevel, ContractStatus, ContractType


# -------------------- Base Schema --------------------
class ContractBase(EmptyStringModel):
    vendor_id: str
    type: ContractType
    start_date: date
    end_date: date
    value: float
    asset_tags: List[str] = []
    renewal_date: Optional[date] = None
    status: ContractStatus = ContractStatus.active
    documents: List[str] = []
    notes: Optional[str] = None


# -------------------- Create / Update --------------------
class ContractCreate(ContractBase):
    pass


class ContractUpdate(EmptyStringModel):
    vendor_id: Optional[str] = None
    type: Optional[ContractType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    value: Optional[float] = None
    asset_tags: Optional[List[str]] = None
    renewal_date: Optional[date] = None
    status: Optional[ContractStatus] = None
    documents: Optional[List[str]] = None
    notes: Optional[str] = None


# -------------------- Output Schema --------------------
class ContractOut(BaseModel):
    id: str
    vendor_id: str
    type: str
    start_date: date
    end_date: date
    value: float
    asset_tags: List[str] = []
    renewal_date: Optional[date] = None
    status: str
    documents: List[str] = []
    notes: Optional[str] = None
    days_until_expiry: Optional[int] = None
    expiry_level: Optional[ContractExpiryLevel] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# -------------------- List Request Filters --------------------
class ContractRequest(CommonQueryParams):
    type: Optional[str] = None
    status: Optional[str] = None
    vendor_id: Optional[str] = None


# -------------------- List Response --------------------
class ContractListResponse(BaseModel):
    contracts: List[ContractOut]
    total: int

    model_config = {"from_attributes": True}


# -------------------- Renewal Reminders --------------------
class RenewalReminder(BaseModel):
    contract_id: str
    vendor_id: str
    vendor_name: Optional[str] = None
    type: str
    end_date: date
    days_until_expiry: int
    reminder_day: int


class RenewalReminderResult(BaseModel):
    count: int
    reminders: List[RenewalReminder]
