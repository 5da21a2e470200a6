"""
Unit Cost API - single and batch cost edits
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from uuid import UUID

from sellerfin.core import get_db, get_current_user_id
from sellerfin.services import CostService
from sellerfin.services.cost_service import MARKETPLACE_MODELS, sync_tracker
from sellerfin.schemas import CostUpdateRequest, BatchCostRequest, CostUpdateResponse, BatchCostResponse

logger = logging.getLogger(__name__)

costs_router = APIRouter(prefix="/costs", tags=["Costs"])

MARKETPLACE_PATTERN = "^(shopee|tiktok)$"


def _check_marketplace(marketplace: str):
    if marketplace not in MARKETPLACE_MODELS:
        raise HTTPException(status_code=400, detail=f"Marketplace inválido: {marketplace}")


@costs_router.put("", response_model=CostUpdateResponse)
def update_cost(
    data: CostUpdateRequest,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    _check_marketplace(data.marketplace)
    try:
        rows = CostService.update_unit_cost(
            db, user_id, data.sku, data.nome_produto, data.custo_unitario, data.marketplace
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CostUpdateResponse(rows_updated=rows, sync_version=sync_tracker.current(user_id))


@costs_router.post("/batch", response_model=BatchCostResponse)
def batch_update_costs(
    data: BatchCostRequest,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    _check_marketplace(data.marketplace)
    try:
        result = CostService.batch_update_costs(db, user_id, data.groups, data.custo_unitario, data.marketplace)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result.status != "success":
        logger.warning(f"Batch cost update for {user_id} finished with status {result.status}")
    return BatchCostResponse(
        status=result.status,
        updated_groups=result.updated_groups,
        failed_groups=result.failed_groups,
        rows_updated=result.rows_updated,
        sync_version=result.sync_version,
        updated_skus=result.updated_skus,
        updated_names=result.updated_names,
    )


@costs_router.get("/sync-version")
def get_sync_version(user_id: UUID = Depends(get_current_user_id)):
    return {"sync_version": sync_tracker.current(user_id)}


@costs_router.get("/known")
def known_costs(
    marketplace: str = Query("shopee", pattern=MARKETPLACE_PATTERN),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    return {"costs": CostService.known_costs(db, user_id, marketplace)}
