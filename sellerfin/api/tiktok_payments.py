"""
TikTok Payments API - imported statements and settlements
"""
from dataclasses import asdict
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from sellerfin.core import get_db, get_current_user_id
from sellerfin.services import ResultsService
from sellerfin.services.export_service import export_filename, export_tiktok_settlements
from sellerfin.services.tiktok_payments import summarize_settlements, summarize_statements
from sellerfin.api.downloads import csv_response


tiktok_payments_router = APIRouter(prefix="/tiktok/payments", tags=["TikTok Payments"])

STATEMENT_FIELDS = (
    "id", "statement_id", "statement_date", "payment_id", "status", "total_settlement_amount",
    "net_sales", "total_fees", "shipping_total", "adjustment_amount",
)

SETTLEMENT_FIELDS = (
    "id", "statement_date", "payment_id", "status", "type", "order_id", "sku_id", "quantidade",
    "nome_produto", "variacao", "data_criacao_pedido", "data_entrega", "total_settlement_amount",
    "net_sales", "total_fees", "affiliate_commission",
)


def _row(obj, fields):
    return {name: getattr(obj, name) for name in fields}


@tiktok_payments_router.get("")
def list_payments(
    type: Optional[str] = Query(None, description="Order, Refund or Adjustment"),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    statements, settlements = ResultsService.get_tiktok_payments(db, user_id, type, search)
    return {
        "statements": [_row(s, STATEMENT_FIELDS) for s in statements],
        "statements_summary": asdict(summarize_statements(statements)),
        "settlements": [_row(s, SETTLEMENT_FIELDS) for s in settlements],
        "settlements_summary": asdict(summarize_settlements(settlements)),
    }


@tiktok_payments_router.get("/export")
def export_payments(
    type: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    _, settlements = ResultsService.get_tiktok_payments(db, user_id, type, search)
    return csv_response(export_tiktok_settlements(settlements), export_filename("pagamentos_tiktok"))
