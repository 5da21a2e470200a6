"""
Pricing calculator.

Per-unit view of a listing: variable costs, contribution margin, share of
fixed costs the product is expected to absorb and the prices that reach
the desired margin. Percent inputs are 0-100.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

ROLE_NEW = "novo"
ROLE_COMPLEMENTARY = "complementar"
ROLE_MAIN = "principal"
ROLE_ADVANCED = "avancado"

# Share of the recurring fixed costs each product role absorbs
DEFAULT_ABSORPTION = {
    ROLE_NEW: 10,
    ROLE_COMPLEMENTARY: 30,
    ROLE_MAIN: 60,
}

ALERT_CRITICAL = "critico"
ALERT_ALERT = "alerta"
ALERT_WARNING = "aviso"
ALERT_INFO = "info"


@dataclass
class PricingInput:
    custo_produto: float = 0
    embalagem: float = 0
    preco_cheio: float = 0
    desconto: float = 0
    comissao_plataforma: float = 20
    taxa_fixa: float = 4
    aliquota_imposto: float = 6
    comissao_afiliados: float = 0
    margem_desejada: float = 30
    papel_produto: str = ROLE_NEW
    absorcao_manual: Optional[float] = None  # Manual share; replaces the role default when set
    volume_esperado_produto: float = 50
    volume_mensal: float = 100
    custos_fixos_recorrentes: float = 0


@dataclass
class PricingAlert:
    tipo: str
    mensagem: str


@dataclass
class PricingResult:
    percentual_absorcao: float
    preco_promocional: float
    custos_variaveis: Dict[str, float]
    total_custos_variaveis: float
    margem_contribuicao: float
    margem_contribuicao_percent: float
    produto_viavel: bool
    custo_fixo_alocado: float
    custo_fixo_por_item: float
    lucro_liquido: float
    margem_real_absorcao: float
    custo_fixo_100_percent: float
    preco_necessario_100_percent: float
    # Full dilution over the monthly volume
    custo_fixo_diluido: float
    custo_total: float
    valor_liquido_recebido: float
    lucro: float
    margem_real: float
    viavel: bool
    margem_atingida: bool
    preco_ideal: float
    margem_inviavel: bool
    alertas: List[PricingAlert] = field(default_factory=list)


def absorption_for(role: str, manual: Optional[float] = None) -> float:
    if role not in DEFAULT_ABSORPTION and role != ROLE_ADVANCED:
        raise ValueError(f"Papel de produto inválido: {role}")
    if manual is not None:
        return manual
    return DEFAULT_ABSORPTION.get(role, DEFAULT_ABSORPTION[ROLE_NEW])


def calculate_pricing(data: PricingInput) -> PricingResult:
    absorption = absorption_for(data.papel_produto, data.absorcao_manual)
    volume = data.volume_mensal if data.volume_mensal > 0 else 1
    product_volume = data.volume_esperado_produto if data.volume_esperado_produto > 0 else 1
    fixed = data.custos_fixos_recorrentes

    promo_price = data.preco_cheio * (1 - data.desconto / 100)

    variable = {
        "produto": data.custo_produto,
        "embalagem": data.embalagem,
        "comissao_plataforma": promo_price * data.comissao_plataforma / 100,
        "taxa_fixa_venda": data.taxa_fixa,
        "impostos": promo_price * data.aliquota_imposto / 100,
        "comissao_afiliados": promo_price * data.comissao_afiliados / 100,
    }
    total_variable = sum(variable.values())

    contribution = promo_price - total_variable
    contribution_pct = contribution / promo_price * 100 if promo_price > 0 else 0.0

    allocated_fixed = fixed * absorption / 100
    fixed_per_item = allocated_fixed / product_volume
    net_profit = contribution - fixed_per_item
    real_margin_absorption = net_profit / promo_price * 100 if promo_price > 0 else 0.0

    fixed_full = fixed / product_volume
    denominator = 1 - (data.comissao_plataforma + data.aliquota_imposto + data.comissao_afiliados + data.margem_desejada) / 100
    price_full = (total_variable + fixed_full + data.taxa_fixa) / denominator if denominator > 0 else 0.0

    diluted_fixed = fixed / volume if fixed > 0 else 0.0
    total_cost = data.custo_produto + data.embalagem + diluted_fixed
    net_received = (
        promo_price
        - variable["comissao_plataforma"]
        - data.taxa_fixa
        - variable["impostos"]
        - variable["comissao_afiliados"]
    )
    profit = net_received - total_cost
    real_margin = profit / promo_price * 100 if promo_price > 0 else 0.0

    result = PricingResult(
        percentual_absorcao=absorption,
        preco_promocional=promo_price,
        custos_variaveis=variable,
        total_custos_variaveis=total_variable,
        margem_contribuicao=contribution,
        margem_contribuicao_percent=contribution_pct,
        produto_viavel=contribution > 0,
        custo_fixo_alocado=allocated_fixed,
        custo_fixo_por_item=fixed_per_item,
        lucro_liquido=net_profit,
        margem_real_absorcao=real_margin_absorption,
        custo_fixo_100_percent=fixed_full,
        preco_necessario_100_percent=price_full,
        custo_fixo_diluido=diluted_fixed,
        custo_total=total_cost,
        valor_liquido_recebido=net_received,
        lucro=profit,
        margem_real=real_margin,
        viavel=profit >= 0,
        margem_atingida=real_margin >= data.margem_desejada,
        preco_ideal=(total_cost + data.taxa_fixa) / denominator if denominator > 0 else 0.0,
        margem_inviavel=denominator <= 0,
    )
    result.alertas = pricing_alerts(result, data.papel_produto)
    return result


def pricing_alerts(result: PricingResult, role: str) -> List[PricingAlert]:
    alerts = []
    price = result.preco_promocional
    if result.margem_contribuicao <= 0 and price > 0:
        alerts.append(PricingAlert(
            ALERT_CRITICAL,
            "Produto INVIÁVEL: não cobre nem os custos variáveis! Revise o preço ou os custos.",
        ))
    if role == ROLE_NEW and result.percentual_absorcao > 20:
        alerts.append(PricingAlert(
            ALERT_ALERT,
            "Atenção: produto novo não deve absorver mais de 20% dos custos fixos. Considere reduzir.",
        ))
    if price > 0 and result.custo_fixo_por_item > price * 0.3:
        alerts.append(PricingAlert(
            ALERT_WARNING,
            "O custo fixo alocado representa mais de 30% do preço de venda. Avalie o volume esperado.",
        ))
    if result.lucro_liquido < 0 and result.margem_contribuicao > 0 and price > 0:
        alerts.append(PricingAlert(
            ALERT_INFO,
            "O produto contribui para os custos fixos, mas não gera lucro líquido no cenário atual.",
        ))
    return alerts
