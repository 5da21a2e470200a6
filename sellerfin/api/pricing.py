"""
Pricing API - price simulation against contribution margin and fixed-cost absorption
"""
from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from uuid import UUID

from sellerfin.core import get_db, get_current_user_id
from sellerfin.services import FixedCostService
from sellerfin.services.pricing_service import DEFAULT_ABSORPTION, PricingInput, calculate_pricing
from sellerfin.schemas import PricingRequest, PricingResponse


pricing_router = APIRouter(prefix="/pricing", tags=["Pricing"])


@pricing_router.get("/roles")
def list_roles():
    return {"absorption": DEFAULT_ABSORPTION}


@pricing_router.post("/calculate", response_model=PricingResponse)
def calculate(
    data: PricingRequest,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    """Without explicit recurring fixed costs, the user's registered total is used"""
    values = data.model_dump()
    if values["custos_fixos_recorrentes"] is None:
        values["custos_fixos_recorrentes"] = FixedCostService.total_recurring(db, user_id)
    try:
        result = calculate_pricing(PricingInput(**values))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return PricingResponse(**asdict(result))
