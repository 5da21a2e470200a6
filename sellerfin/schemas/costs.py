"""
Unit Cost Schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Union

from sellerfin.services.numeric_validation import parse_batch_cost_input, parse_currency_input


class CostUpdateRequest(BaseModel):
    """Single product (or variation) cost edit"""
    sku: Optional[str] = None
    nome_produto: Optional[str] = None
    custo_unitario: Union[str, float]
    marketplace: str = "shopee"

    @field_validator("custo_unitario", mode="before")
    @classmethod
    def parse_cost(cls, v):
        return parse_currency_input(v if isinstance(v, str) else str(v))


class CostGroup(BaseModel):
    sku: Optional[str] = None
    nome_produto: Optional[str] = None


class BatchCostRequest(BaseModel):
    """Same cost applied to every selected group"""
    groups: List[CostGroup] = Field(..., min_length=1)
    custo_unitario: Union[str, float]
    marketplace: str = "shopee"

    @field_validator("custo_unitario", mode="before")
    @classmethod
    def parse_cost(cls, v):
        return parse_batch_cost_input(v if isinstance(v, str) else str(v))


class CostUpdateResponse(BaseModel):
    rows_updated: int
    sync_version: int


class BatchCostResponse(BaseModel):
    status: str
    updated_groups: int
    failed_groups: int
    rows_updated: int
    sync_version: int
    updated_skus: List[str] = []
    updated_names: List[str] = []


class MissingCostResponse(BaseModel):
    key: str
    sku: Optional[str]
    nome_produto: Optional[str]
    quantidade: float

    class Config:
        from_attributes = True
