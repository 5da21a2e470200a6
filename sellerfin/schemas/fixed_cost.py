"""
Fixed Cost Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict
from datetime import datetime
from uuid import UUID


class FixedCostCreate(BaseModel):
    category: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=200)
    amount: float = Field(0, ge=0)
    is_recurring: bool = True
    notes: Optional[str] = None


class FixedCostUpdate(BaseModel):
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    amount: Optional[float] = Field(None, ge=0)
    is_recurring: Optional[bool] = None
    notes: Optional[str] = None


class FixedCostResponse(BaseModel):
    id: UUID
    category: str
    name: str
    amount: float
    is_recurring: bool
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FixedCostsSettingsUpdate(BaseModel):
    monthly_orders: Optional[int] = Field(None, ge=0)
    monthly_products_sold: Optional[int] = Field(None, ge=0)
    monthly_revenue: Optional[float] = Field(None, ge=0)


class FixedCostsSettingsResponse(BaseModel):
    monthly_orders: int
    monthly_products_sold: int
    monthly_revenue: float

    class Config:
        from_attributes = True


class FixedCostMetricsResponse(BaseModel):
    total_recurring: float
    total: float
    cost_per_order: float
    cost_per_product: float
    cost_percentage: float
    by_category: Dict[str, float] = {}

    class Config:
        from_attributes = True
