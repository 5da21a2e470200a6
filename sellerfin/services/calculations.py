"""
Profit aggregation per product / variation.

Pure functions over order lines and a fee profile. Rows may be ORM objects,
dicts or OrderLine values; malformed numeric fields count as 0 so a bad row
never aborts the report.
"""
import math
from dataclasses import dataclass, field, fields
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .numeric_validation import normalize_numeric_text, strip_currency_prefix

GROUP_BY_PRODUCT = "produto"
GROUP_BY_VARIATION = "variacao"

NO_NAME = "Sem nome"
NO_VARIATION = "Sem variação"


@dataclass(frozen=True)
class OrderLine:
    """Normalized sold line item shared by both marketplaces"""
    sku: Optional[str]
    nome_produto: Optional[str]
    variacao: Optional[str] = None
    quantidade: float = 0
    total_faturado: float = 0
    rebate_shopee: float = 0
    desconto_plataforma: float = 0
    desconto_vendedor: float = 0
    custo_unitario: float = 0
    data_pedido: Optional[datetime] = None


@dataclass
class GroupedResult:
    key: str
    nome_produto: str
    sku: str
    variacao: Optional[str]
    itens_vendidos: float
    total_faturado: float
    rebates_shopee: float
    custo_unitario_medio: float
    taxa_shopee_reais: float
    taxa_adicional_itens: float
    total_a_receber: float
    total_gasto_produtos: float
    nf_entrada: float
    imposto: float
    lucro_reais: float
    lucro_percentual: float


@dataclass
class ResultTotals:
    itens_vendidos: float = 0
    total_faturado: float = 0
    rebates_shopee: float = 0
    taxa_shopee_reais: float = 0
    taxa_adicional_itens: float = 0
    total_a_receber: float = 0
    total_gasto_produtos: float = 0
    nf_entrada: float = 0
    imposto: float = 0
    gasto_ads: float = 0
    lucro_bruto: float = 0  # Sum of group profits
    lucro_reais: float = 0  # After ad spend
    lucro_percentual_medio: float = 0
    lucro_percentual_liquido: float = 0


@dataclass
class CalculationResult:
    groups: List[GroupedResult] = field(default_factory=list)
    totals: ResultTotals = field(default_factory=ResultTotals)


@dataclass
class TikTokGroupedResult:
    key: str
    nome_produto: str
    sku: str
    variacao: Optional[str]
    itens_vendidos: float
    total_faturado: float
    desconto_plataforma: float
    desconto_vendedor: float
    custo_unitario_medio: float
    taxa_tiktok_reais: float
    taxa_afiliado_reais: float
    taxa_adicional_itens: float
    total_a_receber: float
    total_gasto_produtos: float
    nf_entrada: float
    imposto: float
    lucro_reais: float
    lucro_percentual: float


@dataclass
class TikTokResultTotals:
    itens_vendidos: float = 0
    total_faturado: float = 0
    desconto_plataforma: float = 0
    desconto_vendedor: float = 0
    taxa_tiktok_reais: float = 0
    taxa_afiliado_reais: float = 0
    taxa_adicional_itens: float = 0
    total_a_receber: float = 0
    total_gasto_produtos: float = 0
    nf_entrada: float = 0
    imposto: float = 0
    gasto_ads: float = 0
    lucro_bruto: float = 0
    lucro_reais: float = 0
    lucro_percentual_medio: float = 0
    lucro_percentual_liquido: float = 0


@dataclass
class TikTokCalculationResult:
    groups: List[TikTokGroupedResult] = field(default_factory=list)
    totals: TikTokResultTotals = field(default_factory=TikTokResultTotals)


# ===================== HELPERS =====================

def read_field(obj: Any, name: str) -> Any:
    """Attribute or key lookup (ORM rows, schemas and plain dicts)"""
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def to_number(value: Any) -> float:
    """Lenient numeric coercion: anything unusable becomes 0"""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    else:
        try:
            number = float(normalize_numeric_text(strip_currency_prefix(str(value))))
        except ValueError:
            return 0.0
    return number if math.isfinite(number) else 0.0


def percentage(part: float, whole: float) -> float:
    """part / whole * 100, 0 when whole is 0"""
    if not whole:
        return 0.0
    return part / whole * 100


def is_empty_sku(sku: Optional[str]) -> bool:
    return sku is None or sku.strip() in ("", "-")


def _as_text(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def to_order_line(row: Any) -> OrderLine:
    if isinstance(row, OrderLine):
        return row
    data_pedido = read_field(row, "data_pedido")
    # Spreadsheet cells may hold numbers in text columns
    return OrderLine(
        sku=_as_text(read_field(row, "sku")),
        nome_produto=_as_text(read_field(row, "nome_produto")),
        variacao=_as_text(read_field(row, "variacao")),
        quantidade=to_number(read_field(row, "quantidade")),
        total_faturado=to_number(read_field(row, "total_faturado")),
        rebate_shopee=to_number(read_field(row, "rebate_shopee")),
        desconto_plataforma=to_number(read_field(row, "desconto_plataforma")),
        desconto_vendedor=to_number(read_field(row, "desconto_vendedor")),
        custo_unitario=to_number(read_field(row, "custo_unitario")),
        data_pedido=data_pedido if isinstance(data_pedido, datetime) else None,
    )


def product_key(line: OrderLine) -> str:
    """SKU, or the product name when the SKU is empty"""
    if not is_empty_sku(line.sku):
        return line.sku.strip()
    return line.nome_produto or NO_NAME


def group_key(line: OrderLine, group_by: str = GROUP_BY_PRODUCT) -> Tuple[str, ...]:
    if group_by == GROUP_BY_VARIATION:
        return (product_key(line), line.variacao or NO_VARIATION)
    if group_by == GROUP_BY_PRODUCT:
        return (product_key(line),)
    raise ValueError(f"Unknown group_by: {group_by}")


def group_lines(orders: Iterable[Any], group_by: str = GROUP_BY_PRODUCT) -> Dict[Tuple[str, ...], List[OrderLine]]:
    """Bucket order lines by key, keeping first-appearance order"""
    groups: Dict[Tuple[str, ...], List[OrderLine]] = {}
    for row in orders:
        line = to_order_line(row)
        groups.setdefault(group_key(line, group_by), []).append(line)
    return groups


def _display_info(key: Tuple[str, ...], lines: List[OrderLine], group_by: str) -> Dict[str, Any]:
    first = lines[0]
    return {
        "key": " | ".join(key),
        "nome_produto": first.nome_produto or NO_NAME,
        "sku": first.sku.strip() if not is_empty_sku(first.sku) else "-",
        "variacao": key[1] if group_by == GROUP_BY_VARIATION else None,
    }


def _product_cost(lines: List[OrderLine]) -> float:
    return sum(line.quantidade * line.custo_unitario for line in lines)


def sort_groups(groups: List[Any], column: str = "total_faturado", descending: bool = True) -> List[Any]:
    """Sorted copy of groups by any result column; empty values go last"""
    if groups and column not in {f.name for f in fields(groups[0])}:
        raise ValueError(f"Unknown column: {column}")
    present = [g for g in groups if getattr(g, column) is not None]
    empty = [g for g in groups if getattr(g, column) is None]
    return sorted(present, key=lambda g: getattr(g, column), reverse=descending) + empty


# ===================== SHOPEE =====================

def calculate_results(orders: Iterable[Any], settings: Any, group_by: str = GROUP_BY_PRODUCT) -> CalculationResult:
    """Group Shopee order lines and derive fees, receivable and profit"""
    commission_rate = to_number(read_field(settings, "taxa_comissao_shopee"))
    per_item_fee = to_number(read_field(settings, "adicional_por_item"))
    nf_entrada_pct = to_number(read_field(settings, "percentual_nf_entrada"))
    outbound_tax = to_number(read_field(settings, "imposto_nf_saida"))
    ad_spend = to_number(read_field(settings, "gasto_shopee_ads"))

    results: List[GroupedResult] = []
    for key, lines in group_lines(orders, group_by).items():
        itens_vendidos = sum(line.quantidade for line in lines)
        total_faturado = sum(line.total_faturado for line in lines)
        rebates_shopee = sum(line.rebate_shopee for line in lines)

        taxa_shopee_reais = total_faturado * commission_rate
        taxa_adicional_itens = itens_vendidos * per_item_fee
        total_a_receber = total_faturado - rebates_shopee - taxa_shopee_reais - taxa_adicional_itens

        total_gasto_produtos = _product_cost(lines)
        custo_unitario_medio = total_gasto_produtos / itens_vendidos if itens_vendidos else 0.0
        nf_entrada = total_gasto_produtos * nf_entrada_pct
        imposto = total_faturado * outbound_tax

        lucro_reais = total_a_receber - total_gasto_produtos - nf_entrada - imposto

        results.append(GroupedResult(
            **_display_info(key, lines, group_by),
            itens_vendidos=itens_vendidos,
            total_faturado=total_faturado,
            rebates_shopee=rebates_shopee,
            custo_unitario_medio=custo_unitario_medio,
            taxa_shopee_reais=taxa_shopee_reais,
            taxa_adicional_itens=taxa_adicional_itens,
            total_a_receber=total_a_receber,
            total_gasto_produtos=total_gasto_produtos,
            nf_entrada=nf_entrada,
            imposto=imposto,
            lucro_reais=lucro_reais,
            lucro_percentual=percentage(lucro_reais, total_faturado),
        ))

    # Ad spend is a flat period cost, only netted out at the totals level
    totals = ResultTotals(gasto_ads=ad_spend)
    for name in ("itens_vendidos", "total_faturado", "rebates_shopee", "taxa_shopee_reais",
                 "taxa_adicional_itens", "total_a_receber", "total_gasto_produtos", "nf_entrada", "imposto"):
        setattr(totals, name, sum(getattr(r, name) for r in results))
    totals.lucro_bruto = sum(r.lucro_reais for r in results)
    totals.lucro_reais = totals.lucro_bruto - ad_spend
    totals.lucro_percentual_medio = percentage(totals.lucro_bruto, totals.total_faturado)
    totals.lucro_percentual_liquido = percentage(totals.lucro_reais, totals.total_faturado)

    return CalculationResult(groups=results, totals=totals)


# ===================== TIKTOK =====================

def _mean_cost(lines: List[OrderLine]) -> float:
    costs = [line.custo_unitario for line in lines if line.custo_unitario > 0]
    return sum(costs) / len(costs) if costs else 0.0


def _share_of_receivable(part: float, receivable: float) -> float:
    return part / receivable * 100 if receivable > 0 else 0.0


def calculate_tiktok_results(orders: Iterable[Any], settings: Any, group_by: str = GROUP_BY_PRODUCT) -> TikTokCalculationResult:
    """
    Same grouping as Shopee; TikTok revenue is already net of discounts, so
    discounts are reported but not deducted again.

    Differences from the Shopee report: the average unit cost is the plain
    mean over lines that have a cost, product cost is items sold times that
    average, and profit percentages are relative to the receivable amount
    (0 when nothing is receivable).
    """
    commission_rate = to_number(read_field(settings, "taxa_comissao_tiktok"))
    affiliate_rate = to_number(read_field(settings, "taxa_afiliado"))
    per_item_fee = to_number(read_field(settings, "adicional_por_item"))
    nf_entrada_pct = to_number(read_field(settings, "percentual_nf_entrada"))
    outbound_tax = to_number(read_field(settings, "imposto_nf_saida"))
    tax_exempt_share = to_number(read_field(settings, "desconto_nf_saida"))
    ad_spend = to_number(read_field(settings, "gasto_tiktok_ads"))

    results: List[TikTokGroupedResult] = []
    for key, lines in group_lines(orders, group_by).items():
        itens_vendidos = sum(line.quantidade for line in lines)
        total_faturado = sum(line.total_faturado for line in lines)

        taxa_tiktok_reais = total_faturado * commission_rate
        taxa_afiliado_reais = total_faturado * affiliate_rate
        taxa_adicional_itens = itens_vendidos * per_item_fee
        total_a_receber = total_faturado - taxa_tiktok_reais - taxa_afiliado_reais - taxa_adicional_itens

        custo_unitario_medio = _mean_cost(lines)
        total_gasto_produtos = itens_vendidos * custo_unitario_medio
        nf_entrada = total_gasto_produtos * nf_entrada_pct
        imposto = total_faturado * (1 - tax_exempt_share) * outbound_tax
        lucro_reais = total_a_receber - total_gasto_produtos - nf_entrada - imposto

        results.append(TikTokGroupedResult(
            **_display_info(key, lines, group_by),
            itens_vendidos=itens_vendidos,
            total_faturado=total_faturado,
            desconto_plataforma=sum(line.desconto_plataforma for line in lines),
            desconto_vendedor=sum(line.desconto_vendedor for line in lines),
            custo_unitario_medio=custo_unitario_medio,
            taxa_tiktok_reais=taxa_tiktok_reais,
            taxa_afiliado_reais=taxa_afiliado_reais,
            taxa_adicional_itens=taxa_adicional_itens,
            total_a_receber=total_a_receber,
            total_gasto_produtos=total_gasto_produtos,
            nf_entrada=nf_entrada,
            imposto=imposto,
            lucro_reais=lucro_reais,
            lucro_percentual=_share_of_receivable(lucro_reais, total_a_receber),
        ))

    totals = TikTokResultTotals(gasto_ads=ad_spend)
    for name in ("itens_vendidos", "total_faturado", "desconto_plataforma", "desconto_vendedor",
                 "taxa_tiktok_reais", "taxa_afiliado_reais", "taxa_adicional_itens", "total_a_receber",
                 "total_gasto_produtos", "nf_entrada", "imposto"):
        setattr(totals, name, sum(getattr(r, name) for r in results))
    totals.lucro_bruto = sum(r.lucro_reais for r in results)
    totals.lucro_reais = totals.lucro_bruto - ad_spend
    totals.lucro_percentual_medio = _share_of_receivable(totals.lucro_reais, totals.total_a_receber)
    totals.lucro_percentual_liquido = totals.lucro_percentual_medio

    return TikTokCalculationResult(groups=results, totals=totals)
