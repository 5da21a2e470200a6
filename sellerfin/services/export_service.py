"""
Semicolon-delimited CSV reports
"""
import csv
import io
from datetime import date
from typing import Any, List, Optional, Sequence

from .calculations import CalculationResult, TikTokCalculationResult, to_number
from .dre import DRESection

SHOPEE_RESULT_HEADERS = [
    "Produto", "SKU", "Custo Unitário", "Itens Vendidos", "Total Faturado", "Rebates",
    "Taxa Shopee", "Taxa Adicional", "Total a Receber", "Custo Produtos", "Imposto",
    "NF Entrada", "Lucro R$", "Lucro %",
]

TIKTOK_RESULT_HEADERS = [
    "Produto", "SKU", "Variação", "Itens Vendidos", "Total Faturado", "Taxa TikTok",
    "Taxa Adicional", "Total a Receber", "Custo Produtos", "Imposto", "NF Entrada",
    "Lucro R$", "Lucro %",
]

TIKTOK_SETTLEMENT_HEADERS = [
    "ID do Pedido", "ID do Pagamento", "Status do Pagamento", "Quantidade", "Nome do Produto",
    "Variação SKU", "Data da Venda", "Data da Entrega", "Data do Pagamento", "Total Recebido",
    "Valor Líquido", "Comissão Afiliado",
]

DRE_HEADERS = ["Descrição", "Valor", "% Receita"]


def money(value: float) -> str:
    return f"{value:.2f}"


def percent(value: Optional[float]) -> str:
    return "" if value is None else f"{value:.1f}"


def quantity(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def _write(headers: Sequence[str], rows: List[Sequence[Any]]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, delimiter=";", lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return output.getvalue()


def export_shopee_results(result: CalculationResult) -> str:
    rows = [
        [
            r.nome_produto,
            r.sku,
            money(r.custo_unitario_medio),
            quantity(r.itens_vendidos),
            money(r.total_faturado),
            money(r.rebates_shopee),
            money(r.taxa_shopee_reais),
            money(r.taxa_adicional_itens),
            money(r.total_a_receber),
            money(r.total_gasto_produtos),
            money(r.imposto),
            money(r.nf_entrada),
            money(r.lucro_reais),
            percent(r.lucro_percentual),
        ]
        for r in result.groups
    ]
    return _write(SHOPEE_RESULT_HEADERS, rows)


def export_tiktok_results(result: TikTokCalculationResult) -> str:
    rows = [
        [
            r.nome_produto,
            r.sku,
            r.variacao or "-",
            quantity(r.itens_vendidos),
            money(r.total_faturado),
            money(r.taxa_tiktok_reais),
            money(r.taxa_adicional_itens),
            money(r.total_a_receber),
            money(r.total_gasto_produtos),
            money(r.imposto),
            money(r.nf_entrada),
            money(r.lucro_reais),
            percent(r.lucro_percentual),
        ]
        for r in result.groups
    ]
    return _write(TIKTOK_RESULT_HEADERS, rows)


def _text(value: Any) -> str:
    return "-" if value is None or value == "" else str(value)


def _br_date(value: Optional[date]) -> str:
    return value.strftime("%d/%m/%Y") if value else "-"


def export_tiktok_settlements(settlements: List[Any]) -> str:
    rows = [
        [
            _text(s.order_id),
            _text(s.payment_id),
            _text(s.status),
            _text(s.quantidade),
            _text(s.nome_produto),
            _text(s.variacao),
            _br_date(s.data_criacao_pedido),
            _br_date(s.data_entrega),
            _br_date(s.statement_date),
            money(to_number(s.total_settlement_amount)),
            money(to_number(s.net_sales)),
            money(abs(to_number(s.affiliate_commission))),
        ]
        for s in settlements
    ]
    return _write(TIKTOK_SETTLEMENT_HEADERS, rows)


def export_dre(sections: List[DRESection]) -> str:
    """Section title rows, then items, then the section total"""
    rows: List[Sequence[Any]] = []
    for section in sections:
        rows.append([section.title, "", ""])
        for item in section.items:
            rows.append([item.label, money(item.value), percent(item.percentage)])
        if section.total:
            rows.append([section.total.label, money(section.total.value), percent(section.total.percentage)])
    return _write(DRE_HEADERS, rows)


def export_filename(prefix: str, day: Optional[date] = None) -> str:
    return f"{prefix}_{(day or date.today()).isoformat()}.csv"
