from pydantic import BaseModel
from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel

# Shared properties
T = TypeVar("T")


class UserToken(BaseModel):
    user_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: str = "normal"
    exp: Optional[int] = None


class CommonQueryParams(EmptyStringModel):
    search: Optional[str] = None
    skip: Optional[int] = 0
    limit: Optional[int] = 10


class ExportRequestParams(BaseModel):
    search: Optional[str] = None
    format: Literal["csv", "xlsx"] = "xlsx"


class ExportResponse(BaseModel):
    filename: str
    data: List[Dict[str, Any]]

    class Config:
        from_attributes = True


class JsonOutResult(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    status_code: str
    message: Optional[str] = None
