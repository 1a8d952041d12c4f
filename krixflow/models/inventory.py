# krixflow/models/inventory.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip()


class FlowAction(str, Enum):
    IN = "IN"
    OUT = "OUT"


class ItemReceive(BaseModel):
    """Body for adding a new material or restocking an existing code."""

    code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    size: Optional[str] = None
    quantity: int = Field(0, ge=0)
    price: Optional[float] = Field(None, ge=0)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Item code is required")
        return v

    @field_validator("name", "category")
    @classmethod
    def required_text(cls, v: str, info: ValidationInfo) -> str:
        v = v.strip()
        if not v:
            raise ValueError(f"Item {info.field_name} is required")
        return v

    @field_validator("size")
    @classmethod
    def strip_size(cls, v):
        return _clean(v)


class ItemUpdate(BaseModel):
    code: str = Field(..., min_length=1)
    name: Optional[str] = None
    category: Optional[str] = None
    size: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Item code is required")
        return v

    @field_validator("name", "category")
    @classmethod
    def blank_not_allowed(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        v = _clean(v)
        if v == "":
            raise ValueError(f"Item {info.field_name} cannot be blank")
        return v

    @field_validator("size")
    @classmethod
    def strip_size(cls, v):
        return _clean(v)


class InventoryItemDB(BaseModel):
    id: str
    code: str
    name: str
    category: str
    size: Optional[str] = None
    quantity: int = 0
    price: Optional[float] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StockEntry(BaseModel):
    code: str
    name: str
    category: str
    size: Optional[str] = None
    quantity: int = 0
    price: Optional[float] = None


class FlowRecordDB(BaseModel):
    id: str
    date: datetime
    code: str
    name: str
    action: FlowAction
    qty: int = Field(..., ge=1)
    note: Optional[str] = None
    inventory_id: Optional[str] = None
    user_id: Optional[str] = None


# ---- response envelopes ----
class ItemResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: Optional[InventoryItemDB] = None
    flow: Optional[FlowRecordDB] = None


class ItemListResponse(BaseModel):
    success: bool = True
    data: List[InventoryItemDB]


class StockResponse(BaseModel):
    success: bool = True
    data: List[StockEntry]


class FlowListResponse(BaseModel):
    success: bool = True
    data: List[FlowRecordDB]
    total: int
    limit: int
    skip: int
