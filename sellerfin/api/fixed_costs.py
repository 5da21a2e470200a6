"""
Fixed Costs API - operating expenses, volume settings and metrics
"""
from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from sellerfin.core import get_db, get_current_user_id
from sellerfin.services import FixedCostService
from sellerfin.services.fixed_cost_service import COST_CATEGORIES
from sellerfin.schemas import (
    FixedCostCreate, FixedCostUpdate, FixedCostResponse,
    FixedCostsSettingsUpdate, FixedCostsSettingsResponse, FixedCostMetricsResponse,
)


fixed_costs_router = APIRouter(prefix="/fixed-costs", tags=["Fixed Costs"])


@fixed_costs_router.get("/categories")
def list_categories():
    return COST_CATEGORIES


@fixed_costs_router.get("/settings", response_model=FixedCostsSettingsResponse)
def get_fixed_cost_settings(db: Session = Depends(get_db), user_id: UUID = Depends(get_current_user_id)):
    return FixedCostService.get_or_create_settings(db, user_id)


@fixed_costs_router.put("/settings", response_model=FixedCostsSettingsResponse)
def update_fixed_cost_settings(
    data: FixedCostsSettingsUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    return FixedCostService.update_settings(db, user_id, data.model_dump(exclude_unset=True, exclude_none=True))


@fixed_costs_router.get("/metrics", response_model=FixedCostMetricsResponse)
def get_fixed_cost_metrics(db: Session = Depends(get_db), user_id: UUID = Depends(get_current_user_id)):
    return FixedCostMetricsResponse(**asdict(FixedCostService.get_metrics(db, user_id)))


@fixed_costs_router.get("", response_model=List[FixedCostResponse])
def list_fixed_costs(db: Session = Depends(get_db), user_id: UUID = Depends(get_current_user_id)):
    return FixedCostService.list_costs(db, user_id)


@fixed_costs_router.post("", response_model=FixedCostResponse, status_code=201)
def create_fixed_cost(data: FixedCostCreate, db: Session = Depends(get_db), user_id: UUID = Depends(get_current_user_id)):
    return FixedCostService.create_cost(db, user_id, data.model_dump())


@fixed_costs_router.put("/{cost_id}", response_model=FixedCostResponse)
def update_fixed_cost(
    cost_id: UUID,
    data: FixedCostUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    cost = FixedCostService.update_cost(db, user_id, cost_id, data.model_dump(exclude_unset=True))
    if not cost:
        raise HTTPException(status_code=404, detail="Custo fixo não encontrado")
    return cost


@fixed_costs_router.delete("/{cost_id}")
def delete_fixed_cost(cost_id: UUID, db: Session = Depends(get_db), user_id: UUID = Depends(get_current_user_id)):
    if not FixedCostService.delete_cost(db, user_id, cost_id):
        raise HTTPException(status_code=404, detail="Custo fixo não encontrado")
    return {"success": True}
