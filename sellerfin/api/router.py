"""
API Router - JSON Endpoints
"""
from fastapi import APIRouter
from datetime import datetime

from sellerfin.api.settings import settings_router
from sellerfin.api.results import results_router
from sellerfin.api.costs import costs_router
from sellerfin.api.imports import imports_router
from sellerfin.api.dre import dre_router
from sellerfin.api.fixed_costs import fixed_costs_router
from sellerfin.api.pricing import pricing_router
from sellerfin.api.cash_flow import cash_flow_router
from sellerfin.api.tiktok_payments import tiktok_payments_router

api_router = APIRouter(tags=["API"])

# Include sub-routers
api_router.include_router(settings_router)
api_router.include_router(results_router)
api_router.include_router(costs_router)
api_router.include_router(imports_router)
api_router.include_router(dre_router)
api_router.include_router(fixed_costs_router)
api_router.include_router(pricing_router)
api_router.include_router(cash_flow_router)
api_router.include_router(tiktok_payments_router)


@api_router.get("/status")
async def api_status():
    return {"status": "ok", "version": "1.0.0", "timestamp": datetime.now().isoformat()}
