"""
Results API - per-product profit reports for Shopee and TikTok Shop
"""
from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from sellerfin.core import get_db, get_current_user_id
from sellerfin.services import ResultsService
from sellerfin.services.calculations import GROUP_BY_PRODUCT, sort_groups
from sellerfin.services.export_service import export_filename, export_shopee_results, export_tiktok_results
from sellerfin.api.downloads import csv_response


results_router = APIRouter(prefix="/results", tags=["Results"])

GROUP_BY_PATTERN = "^(produto|variacao)$"


def _sorted(result, sort_by: str, descending: bool):
    try:
        result.groups = sort_groups(result.groups, sort_by, descending)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Coluna de ordenação inválida: {sort_by}")
    return result


def _payload(settings, result):
    return {
        "settings_id": str(settings.id) if settings else None,
        "settings_name": settings.name if settings else None,
        "groups": [asdict(g) for g in result.groups],
        "totals": asdict(result.totals),
    }


@results_router.get("/shopee")
def shopee_results(
    settings_id: Optional[UUID] = Query(None),
    group_by: str = Query(GROUP_BY_PRODUCT, pattern=GROUP_BY_PATTERN),
    sort_by: str = Query("total_faturado"),
    descending: bool = Query(True),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    settings, result = ResultsService.get_shopee_results(db, user_id, settings_id, group_by)
    return _payload(settings, _sorted(result, sort_by, descending))


@results_router.get("/shopee/export")
def export_shopee(
    settings_id: Optional[UUID] = Query(None),
    group_by: str = Query(GROUP_BY_PRODUCT, pattern=GROUP_BY_PATTERN),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    _, result = ResultsService.get_shopee_results(db, user_id, settings_id, group_by)
    return csv_response(export_shopee_results(result), export_filename("resultados_shopee"))


@results_router.get("/tiktok")
def tiktok_results(
    settings_id: Optional[UUID] = Query(None),
    group_by: str = Query(GROUP_BY_PRODUCT, pattern=GROUP_BY_PATTERN),
    sort_by: str = Query("total_faturado"),
    descending: bool = Query(True),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    settings, result = ResultsService.get_tiktok_results(db, user_id, settings_id, group_by)
    return _payload(settings, _sorted(result, sort_by, descending))


@results_router.get("/tiktok/export")
def export_tiktok(
    settings_id: Optional[UUID] = Query(None),
    group_by: str = Query(GROUP_BY_PRODUCT, pattern=GROUP_BY_PATTERN),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    _, result = ResultsService.get_tiktok_results(db, user_id, settings_id, group_by)
    return csv_response(export_tiktok_results(result), export_filename("resultados_tiktok"))
