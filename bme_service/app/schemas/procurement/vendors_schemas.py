from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Literal, Optional
from datetime import datetime
import re

from shared.core.schemas import CommonQueryParams
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.procurement_enum import VendorStatus

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _normalize_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please enter a valid email address")
    return value


class EscalationContact(BaseModel):
    level: int = Field(ge=1, le=5)
    name: str
    email: str
    phone: str


# -------------------- Create / Update --------------------
class VendorCreate(EmptyStringModel):
    name: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    rating: float = Field(default=0, ge=0, le=5)
    performance_score: float = Field(default=0, ge=0, le=100)
    escalation_matrix: List[EscalationContact] = []
    status: VendorStatus = VendorStatus.active

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value):
        return _normalize_email(value)


class VendorUpdate(EmptyStringModel):
    name: Optional[str] = None
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    performance_score: Optional[float] = Field(default=None, ge=0, le=100)
    escalation_matrix: Optional[List[EscalationContact]] = None
    status: Optional[VendorStatus] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value):
        return _normalize_email(value)


# -------------------- Output Schema --------------------
class VendorOut(BaseModel):
    id: str
    name: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    rating: float = 0
    performance_score: float = 0
    escalation_matrix: List[EscalationContact] = []
    status: str
    active_contracts_count: int = 0
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class VendorRequest(CommonQueryParams):
    status: Optional[str] = None
    min_rating: Optional[float] = None
    sort_by: Literal["name", "rating", "performance_score"] = "name"
    sort_order: Literal["asc", "desc"] = "asc"


class VendorListResponse(BaseModel):
    vendors: List[VendorOut]
    total: int


class VendorPerformance(BaseModel):
    rating: float
    performance_score: float
    total_contracts: int
    active_contracts: int
    expired_contracts: int
    total_contract_value: float
    expiring_soon: int
    expired: int
    average_contract_value: float
    contract_renewal_rate: float
