"""
Income statement (DRE) composition.

Combines Shopee orders, TikTok orders, TikTok settlements and fixed costs for
one period into a 12-section statement. Every percentage is relative to gross
revenue and is 0 when there is no revenue.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .calculations import percentage, read_field, to_number, to_order_line
from .periods import DREPeriod, filter_by_period, month_coverage

ALERT_ERROR = "error"
ALERT_WARNING = "warning"
ALERT_INFO = "info"


@dataclass
class DREAlerta:
    tipo: str
    mensagem: str
    campo: str


@dataclass
class DREData:
    periodo: DREPeriod

    # 1. Gross revenue
    receita_bruta_shopee: float = 0
    receita_bruta_tiktok: float = 0
    receita_bruta_total: float = 0

    # 2. Sales taxes
    icms: float = 0  # DIFAL + penalties
    iss_simples: float = 0
    impostos_sobre_vendas_total: float = 0

    # 3. Cancellations and refunds
    cancelamentos: float = 0
    devolucoes: float = 0
    deducoes_total: float = 0

    # 4. Net revenue
    receita_liquida: float = 0

    # 5. COGS
    custo_produtos: float = 0
    custo_embalagem: float = 0
    custo_frete_envio: float = 0
    nf_entrada: float = 0
    cogs_total: float = 0

    # 6. Gross profit
    lucro_bruto: float = 0
    margem_bruta: float = 0

    # 7. Variable costs
    comissoes_marketplace: float = 0
    comissoes_afiliados: float = 0
    ads_marketing: float = 0
    taxas_gateway: float = 0
    taxas_servicos: float = 0
    custos_variaveis_total: float = 0

    # 8. Contribution margin
    margem_contribuicao: float = 0
    percentual_margem_contribuicao: float = 0

    # 9. Fixed costs (monthly total and prorated share)
    custos_fixos_por_categoria: Dict[str, float] = field(default_factory=dict)
    custos_fixos_total: float = 0
    custos_fixos_prorrateados: float = 0
    fator_prorrateio: float = 0
    dias_periodo: int = 0

    # 10. Operating result
    lucro_operacional: float = 0
    margem_operacional: float = 0

    # 11. Financial expenses
    juros_multas: float = 0
    impostos_sobre_lucro: float = 0
    despesas_financeiras_total: float = 0

    # 12. Net result
    lucro_liquido: float = 0
    margem_liquida: float = 0

    # Memo: already netted out of TikTok revenue
    desconto_plataforma_tiktok: float = 0
    desconto_vendedor_tiktok: float = 0

    alertas: List[DREAlerta] = field(default_factory=list)

    def percent_of_revenue(self, value: float) -> float:
        return percentage(value, self.receita_bruta_total)


@dataclass
class DRELineItem:
    label: str
    value: float
    percentage: Optional[float] = None
    is_subtotal: bool = False
    is_total: bool = False
    is_highlight: bool = False
    indent: int = 0


@dataclass
class DRESection:
    title: str
    items: List[DRELineItem] = field(default_factory=list)
    total: Optional[DRELineItem] = None


def _abs_sum(rows: List[Any], *names: str) -> float:
    return sum(abs(to_number(read_field(row, name))) for row in rows for name in names)


def generate_alerts(dre: DREData, has_shopee_settings: bool = True, has_tiktok_settings: bool = True) -> List[DREAlerta]:
    alertas: List[DREAlerta] = []
    revenue = dre.receita_bruta_total

    if dre.receita_bruta_shopee > 0 and not has_shopee_settings:
        alertas.append(DREAlerta(
            ALERT_WARNING,
            "Vendas Shopee sem configuração de taxas. Cadastre as taxas da Shopee.",
            "shopee_settings",
        ))
    if dre.receita_bruta_tiktok > 0 and not has_tiktok_settings:
        alertas.append(DREAlerta(
            ALERT_WARNING,
            "Vendas TikTok Shop sem configuração de taxas. Cadastre as taxas do TikTok.",
            "tiktok_settings",
        ))
    if dre.impostos_sobre_vendas_total == 0 and revenue > 0:
        alertas.append(DREAlerta(
            ALERT_WARNING,
            "Nenhum imposto sobre vendas configurado. Verifique as configurações de Simples Nacional/ISS.",
            "impostos_sobre_vendas_total",
        ))
    if dre.cogs_total == 0 and revenue > 0:
        alertas.append(DREAlerta(
            ALERT_ERROR,
            "Custo dos produtos (COGS) zerado. Cadastre os custos unitários dos produtos.",
            "cogs_total",
        ))
    if dre.margem_contribuicao < 0:
        alertas.append(DREAlerta(
            ALERT_ERROR,
            "Margem de contribuição negativa! A operação não é sustentável.",
            "margem_contribuicao",
        ))
    if dre.lucro_operacional < 0 and dre.margem_contribuicao > 0:
        alertas.append(DREAlerta(
            ALERT_WARNING,
            "Lucro operacional negativo. Custos fixos estão acima da margem de contribuição.",
            "lucro_operacional",
        ))
    if dre.custos_fixos_total == 0 and revenue > 0:
        alertas.append(DREAlerta(
            ALERT_INFO,
            "Nenhum custo fixo cadastrado. Cadastre custos fixos para uma DRE completa.",
            "custos_fixos_total",
        ))
    if dre.custos_fixos_total > 0 and revenue == 0:
        alertas.append(DREAlerta(
            ALERT_WARNING,
            "Custos fixos cadastrados sem receita no período.",
            "receita_bruta_total",
        ))
    return alertas


def calculate_dre(
    shopee_orders: Iterable[Any],
    tiktok_orders: Iterable[Any],
    tiktok_settlements: Iterable[Any],
    fixed_costs: Iterable[Any],
    shopee_settings: Any,
    tiktok_settings: Any,
    period: DREPeriod,
) -> DREData:
    """Build the DRE for one period. Inputs may span any dates; they are filtered here."""
    shopee = [to_order_line(o) for o in filter_by_period(shopee_orders, period, "data_pedido")]
    tiktok = [to_order_line(o) for o in filter_by_period(tiktok_orders, period, "data_pedido")]
    settlements = filter_by_period(tiktok_settlements, period, "statement_date")

    shopee_commission = to_number(read_field(shopee_settings, "taxa_comissao_shopee"))
    shopee_item_fee = to_number(read_field(shopee_settings, "adicional_por_item"))
    shopee_nf_entrada = to_number(read_field(shopee_settings, "percentual_nf_entrada"))
    shopee_tax = to_number(read_field(shopee_settings, "imposto_nf_saida"))
    tiktok_nf_entrada = to_number(read_field(tiktok_settings, "percentual_nf_entrada"))
    tiktok_tax = to_number(read_field(tiktok_settings, "imposto_nf_saida"))

    dre = DREData(periodo=period, dias_periodo=period.days)

    # 1. Gross revenue
    dre.receita_bruta_shopee = sum(o.total_faturado for o in shopee)
    dre.receita_bruta_tiktok = sum(o.total_faturado for o in tiktok)
    dre.receita_bruta_total = dre.receita_bruta_shopee + dre.receita_bruta_tiktok

    # 2. Sales taxes
    dre.icms = _abs_sum(settlements, "icms_difal", "icms_penalty")
    dre.iss_simples = dre.receita_bruta_shopee * shopee_tax + dre.receita_bruta_tiktok * tiktok_tax
    dre.impostos_sobre_vendas_total = dre.icms + dre.iss_simples

    # 3. Cancellations and refunds
    refunds = [s for s in settlements if str(read_field(s, "type") or "").lower() == "refund"]
    dre.devolucoes = sum(
        abs(to_number(read_field(s, "refund_subtotal")) or to_number(read_field(s, "customer_refund")))
        for s in refunds
    )
    dre.deducoes_total = dre.cancelamentos + dre.devolucoes

    # 4. Net revenue
    dre.receita_liquida = dre.receita_bruta_total - dre.impostos_sobre_vendas_total - dre.deducoes_total

    # 5. COGS
    shopee_cost = sum(o.quantidade * o.custo_unitario for o in shopee)
    tiktok_cost = sum(o.quantidade * o.custo_unitario for o in tiktok)
    dre.custo_produtos = shopee_cost + tiktok_cost
    for s in settlements:
        shipping_cost = abs(to_number(read_field(s, "tiktok_shipping_fee")))
        shipping_income = sum(
            to_number(read_field(s, name))
            for name in ("customer_shipping_fee", "shipping_subsidy", "shipping_incentive")
        )
        dre.custo_frete_envio += max(0.0, shipping_cost - shipping_income)
    dre.nf_entrada = shopee_cost * shopee_nf_entrada + tiktok_cost * tiktok_nf_entrada
    dre.cogs_total = dre.custo_produtos + dre.custo_embalagem + dre.custo_frete_envio + dre.nf_entrada

    # 6. Gross profit
    dre.lucro_bruto = dre.receita_liquida - dre.cogs_total
    dre.margem_bruta = dre.percent_of_revenue(dre.lucro_bruto)

    # 7. Variable costs (ad spend is a flat figure, not prorated)
    dre.comissoes_marketplace = (
        dre.receita_bruta_shopee * shopee_commission + _abs_sum(settlements, "tiktok_commission_fee")
    )
    dre.comissoes_afiliados = _abs_sum(
        settlements, "affiliate_commission", "affiliate_partner_commission", "affiliate_shop_ads_commission"
    )
    dre.ads_marketing = (
        to_number(read_field(shopee_settings, "gasto_shopee_ads"))
        + to_number(read_field(tiktok_settings, "gasto_tiktok_ads"))
    )
    dre.taxas_servicos = sum(o.quantidade for o in shopee) * shopee_item_fee + _abs_sum(
        settlements, "sfp_service_fee", "fee_per_item", "voucher_xtra_fee", "live_specials_fee", "bonus_cashback_fee"
    )
    dre.custos_variaveis_total = (
        dre.comissoes_marketplace + dre.comissoes_afiliados + dre.ads_marketing
        + dre.taxas_gateway + dre.taxas_servicos
    )

    # 8. Contribution margin
    dre.margem_contribuicao = dre.lucro_bruto - dre.custos_variaveis_total
    dre.percentual_margem_contribuicao = dre.percent_of_revenue(dre.margem_contribuicao)

    # 9. Fixed costs: monthly amounts scaled by month coverage
    dre.fator_prorrateio = month_coverage(period)
    for cost in fixed_costs:
        amount = to_number(read_field(cost, "amount"))
        category = read_field(cost, "category") or "Outros"
        dre.custos_fixos_total += amount
        dre.custos_fixos_por_categoria[category] = (
            dre.custos_fixos_por_categoria.get(category, 0.0) + amount * dre.fator_prorrateio
        )
    dre.custos_fixos_prorrateados = dre.custos_fixos_total * dre.fator_prorrateio

    # 10. Operating result
    dre.lucro_operacional = dre.margem_contribuicao - dre.custos_fixos_prorrateados
    dre.margem_operacional = dre.percent_of_revenue(dre.lucro_operacional)

    # 11. Financial expenses (no data source yet)
    dre.despesas_financeiras_total = dre.juros_multas + dre.impostos_sobre_lucro

    # 12. Net result
    dre.lucro_liquido = dre.lucro_operacional - dre.despesas_financeiras_total
    dre.margem_liquida = dre.percent_of_revenue(dre.lucro_liquido)

    dre.desconto_plataforma_tiktok = sum(o.desconto_plataforma for o in tiktok)
    dre.desconto_vendedor_tiktok = sum(o.desconto_vendedor for o in tiktok)

    dre.alertas = generate_alerts(dre, shopee_settings is not None, tiktok_settings is not None)
    return dre


def format_dre_for_display(dre: DREData) -> List[DRESection]:
    """Ordered sections ready to render; deductions are shown as negatives"""
    pct = dre.percent_of_revenue

    def item(label: str, value: float) -> DRELineItem:
        return DRELineItem(label, value, pct(value), indent=1)

    def subtotal(label: str, value: float) -> DRELineItem:
        return DRELineItem(label, value, pct(value), is_subtotal=True)

    def total(label: str, value: float) -> DRELineItem:
        return DRELineItem(label, value, pct(value), is_total=True, is_highlight=True)

    sections = [
        DRESection("RECEITA OPERACIONAL BRUTA", [
            item("Vendas Shopee", dre.receita_bruta_shopee),
            item("Vendas TikTok Shop", dre.receita_bruta_tiktok),
        ], subtotal("RECEITA BRUTA TOTAL", dre.receita_bruta_total)),
        DRESection("IMPOSTOS SOBRE VENDAS", [
            item("ICMS (DIFAL + Penalties)", -dre.icms),
            item("Simples Nacional / ISS", -dre.iss_simples),
        ], subtotal("TOTAL IMPOSTOS", -dre.impostos_sobre_vendas_total)),
        DRESection("CANCELAMENTOS E DEVOLUÇÕES", [
            item("Cancelamentos", -dre.cancelamentos),
            item("Devoluções", -dre.devolucoes),
        ], subtotal("TOTAL DEDUÇÕES", -dre.deducoes_total)),
        DRESection("RECEITA LÍQUIDA", [], total("RECEITA LÍQUIDA", dre.receita_liquida)),
        DRESection("CUSTO DO PRODUTO/SERVIÇO (COGS)", [
            item("Custo das Mercadorias", -dre.custo_produtos),
            item("Embalagens", -dre.custo_embalagem),
            item("Frete de Envio (seller)", -dre.custo_frete_envio),
            item("NF de Entrada", -dre.nf_entrada),
        ], subtotal("COGS TOTAL", -dre.cogs_total)),
        DRESection("RESULTADO BRUTO", [], total("LUCRO BRUTO", dre.lucro_bruto)),
        DRESection("CUSTOS VARIÁVEIS OPERACIONAIS", [
            item("Comissões Marketplace (Shopee + TikTok)", -dre.comissoes_marketplace),
            item("Comissões Afiliados", -dre.comissoes_afiliados),
            item("Ads e Marketing", -dre.ads_marketing),
            item("Taxas Gateway/Pagamento", -dre.taxas_gateway),
            item("Taxas de Serviços (SFP, etc)", -dre.taxas_servicos),
        ], subtotal("TOTAL CUSTOS VARIÁVEIS", -dre.custos_variaveis_total)),
        DRESection("MARGEM DE CONTRIBUIÇÃO", [], total("MARGEM DE CONTRIBUIÇÃO", dre.margem_contribuicao)),
        DRESection(
            f"CUSTOS FIXOS (prorrateado: {dre.dias_periodo} dias)",
            [item(category, -amount) for category, amount in dre.custos_fixos_por_categoria.items()],
            subtotal("TOTAL CUSTOS FIXOS", -dre.custos_fixos_prorrateados),
        ),
        DRESection("RESULTADO OPERACIONAL", [], total("LUCRO OPERACIONAL", dre.lucro_operacional)),
        DRESection("DESPESAS FINANCEIRAS E IMPOSTOS SOBRE LUCRO", [
            item("Juros e Multas", -dre.juros_multas),
            item("IRPJ / CSLL", -dre.impostos_sobre_lucro),
        ], subtotal("TOTAL DESPESAS FINANCEIRAS", -dre.despesas_financeiras_total)),
        DRESection("RESULTADO FINAL", [], total("LUCRO LÍQUIDO", dre.lucro_liquido)),
        # Memo only, never part of the totals above
        DRESection("INFORMATIVO: DESCONTOS TIKTOK", [
            item("Desconto Plataforma", dre.desconto_plataforma_tiktok),
            item("Desconto Vendedor", dre.desconto_vendedor_tiktok),
        ]),
    ]
    return sections
