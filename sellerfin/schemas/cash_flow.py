"""
Cash Flow Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from uuid import UUID


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: str = Field(..., pattern="^(income|expense)$")
    color: str = "#6B7280"
    icon: str = "circle"


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = None
    icon: Optional[str] = None


class CategoryResponse(BaseModel):
    id: UUID
    name: str
    type: str
    color: Optional[str] = None
    icon: Optional[str] = None
    is_default: bool

    class Config:
        from_attributes = True


class EntryCreate(BaseModel):
    category_id: Optional[UUID] = None
    description: str = Field(..., min_length=1, max_length=255)
    amount: float = Field(..., gt=0)
    type: str
    date: date
    status: str = "pending"
    due_date: Optional[date] = None
    is_recurring: bool = False
    recurrence_type: Optional[str] = None
    recurrence_end_date: Optional[date] = None
    notes: Optional[str] = None


class EntryUpdate(BaseModel):
    category_id: Optional[UUID] = None
    description: Optional[str] = Field(None, min_length=1, max_length=255)
    amount: Optional[float] = Field(None, gt=0)
    type: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[date] = None
    is_recurring: Optional[bool] = None
    recurrence_type: Optional[str] = None
    recurrence_end_date: Optional[date] = None
    notes: Optional[str] = None
    date: Optional[date] = None  # Kept last: the field name shadows the type below it


class EntryStatusUpdate(BaseModel):
    status: str


class EntryResponse(BaseModel):
    id: UUID
    category_id: Optional[UUID] = None
    category_name: Optional[str] = None
    description: str
    amount: float
    type: str
    date: date
    status: str
    due_date: Optional[date] = None
    is_recurring: bool
    recurrence_type: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CategoryTotalResponse(BaseModel):
    category_id: Optional[UUID] = None
    name: str
    type: str
    total: float

    class Config:
        from_attributes = True


class CashFlowSummaryResponse(BaseModel):
    total_income: float
    total_expense: float
    balance: float
    realized_income: float
    realized_expense: float
    realized_balance: float
    pending_income: float
    pending_expense: float
    by_category: List[CategoryTotalResponse] = []

    class Config:
        from_attributes = True
