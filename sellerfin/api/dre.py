"""
DRE API - income statement for a preset or custom period
"""
from dataclasses import asdict
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from sellerfin.core import get_db, get_current_user_id
from sellerfin.services import DREService
from sellerfin.services.dre import format_dre_for_display
from sellerfin.services.export_service import export_dre, export_filename
from sellerfin.services.periods import CURRENT_MONTH, DREPeriod, custom_period, get_default_periods, period_for
from sellerfin.api.downloads import csv_response


dre_router = APIRouter(prefix="/dre", tags=["DRE"])


def resolve_period(
    period: str = Query(CURRENT_MONTH, description="Preset key; ignored when start and end are given"),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
) -> DREPeriod:
    if start or end:
        if not (start and end):
            raise HTTPException(status_code=400, detail="Informe data inicial e final.")
        try:
            return custom_period(start, end)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    try:
        return period_for(period)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Período inválido: {period}")


@dre_router.get("/periods")
def list_periods():
    return [asdict(p) for p in get_default_periods()]


@dre_router.get("")
def get_dre(
    period: DREPeriod = Depends(resolve_period),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    dre = DREService.get_dre(db, user_id, period)
    return {
        "period": asdict(period),
        "data": asdict(dre),
        "sections": [asdict(s) for s in format_dre_for_display(dre)],
        "alerts": [asdict(a) for a in dre.alertas],
    }


@dre_router.get("/export")
def export_dre_csv(
    period: DREPeriod = Depends(resolve_period),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    dre = DREService.get_dre(db, user_id, period)
    return csv_response(export_dre(format_dre_for_display(dre)), export_filename(f"dre_{period.key}"))
