"""
TikTok payments view: imported statements and per-order settlements with
their summaries.

Fees, refunds and discounts come in with either sign depending on the
export, so they are summed as absolute values.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Optional

from .calculations import read_field, to_number

TYPE_ORDER = "order"
TYPE_REFUND = "refund"

SEARCH_FIELDS = ("order_id", "nome_produto", "variacao", "sku_id")


@dataclass
class StatementsSummary:
    total_recebido: float = 0
    vendas_liquidas: float = 0
    total_taxas: float = 0
    total_frete: float = 0
    ajustes: float = 0
    quantidade_extratos: int = 0
    periodo_inicio: Optional[datetime] = None
    periodo_fim: Optional[datetime] = None


@dataclass
class SettlementsSummary:
    total_recebido: float = 0
    vendas_brutas: float = 0
    pagamento_cliente: float = 0
    vendas_liquidas: float = 0
    total_taxas: float = 0
    total_reembolsos: float = 0
    descontos_vendedor: float = 0
    descontos_plataforma: float = 0
    saldo_frete: float = 0
    quantidade_registros: int = 0
    quantidade_pedidos: int = 0
    quantidade_reembolsos: int = 0


def _sum(rows: List[Any], name: str) -> float:
    return sum(to_number(read_field(r, name)) for r in rows)


def _sum_abs(rows: List[Any], *names: str) -> float:
    return sum(abs(to_number(read_field(r, name))) for r in rows for name in names)


def _is_type(row: Any, kind: str) -> bool:
    return (read_field(row, "type") or "").strip().lower() == kind


def summarize_statements(statements: Iterable[Any]) -> StatementsSummary:
    rows = list(statements)
    dates = [d for d in (read_field(r, "statement_date") for r in rows) if d is not None]
    return StatementsSummary(
        total_recebido=_sum(rows, "total_settlement_amount"),
        vendas_liquidas=_sum(rows, "net_sales"),
        total_taxas=_sum_abs(rows, "total_fees"),
        total_frete=_sum(rows, "shipping_total"),
        ajustes=_sum(rows, "adjustment_amount"),
        quantidade_extratos=len(rows),
        periodo_inicio=min(dates) if dates else None,
        periodo_fim=max(dates) if dates else None,
    )


def summarize_settlements(settlements: Iterable[Any]) -> SettlementsSummary:
    """
    Totals over the settlement rows shown.

    Shipping balance is what the buyer paid for shipping plus incentives,
    minus what TikTok charged and what was refunded.
    """
    rows = list(settlements)
    saldo_frete = sum(
        to_number(read_field(r, "customer_shipping_fee"))
        - abs(to_number(read_field(r, "tiktok_shipping_fee")))
        + to_number(read_field(r, "shipping_incentive"))
        - abs(to_number(read_field(r, "refunded_shipping")))
        for r in rows
    )
    return SettlementsSummary(
        total_recebido=_sum(rows, "total_settlement_amount"),
        vendas_brutas=_sum(rows, "subtotal_before_discounts"),
        pagamento_cliente=_sum(rows, "customer_payment"),
        vendas_liquidas=_sum(rows, "net_sales"),
        total_taxas=_sum_abs(rows, "total_fees"),
        total_reembolsos=_sum_abs(rows, "refund_subtotal", "customer_refund"),
        descontos_vendedor=_sum_abs(rows, "seller_discounts", "seller_cofunded_discount"),
        descontos_plataforma=_sum_abs(rows, "platform_discounts", "platform_cofunded_discount"),
        saldo_frete=saldo_frete,
        quantidade_registros=len(rows),
        quantidade_pedidos=sum(1 for r in rows if _is_type(r, TYPE_ORDER)),
        quantidade_reembolsos=sum(1 for r in rows if _is_type(r, TYPE_REFUND)),
    )


def filter_settlements(settlements: Iterable[Any], type: Optional[str] = None, search: Optional[str] = None) -> List[Any]:
    """Keep rows of the given type whose order id, product, variation or SKU contains search"""
    rows = list(settlements)
    if type:
        rows = [r for r in rows if _is_type(r, type.strip().lower())]
    term = (search or "").strip().lower()
    if term:
        rows = [
            r for r in rows
            if any(term in str(read_field(r, name) or "").lower() for name in SEARCH_FIELDS)
        ]
    return rows
