import pytest

from sellerfin.services.pricing_service import (
    PricingInput,
    absorption_for,
    calculate_pricing,
)


def alert_types(result):
    return [a.tipo for a in result.alertas]


def test_role_absorption():
    assert absorption_for("novo") == 10
    assert absorption_for("complementar") == 30
    assert absorption_for("principal") == 60
    assert absorption_for("avancado", 45) == 45
    with pytest.raises(ValueError):
        absorption_for("desconhecido")


def test_contribution_and_allocated_fixed_cost():
    result = calculate_pricing(PricingInput(
        custo_produto=30, embalagem=2, preco_cheio=100, desconto=0,
        comissao_plataforma=20, taxa_fixa=4, aliquota_imposto=6, comissao_afiliados=0,
        papel_produto="principal", volume_esperado_produto=60, custos_fixos_recorrentes=1000,
    ))

    assert result.preco_promocional == 100
    assert result.total_custos_variaveis == pytest.approx(30 + 2 + 20 + 4 + 6)
    assert result.margem_contribuicao == pytest.approx(38)
    assert result.margem_contribuicao_percent == pytest.approx(38)
    assert result.custo_fixo_alocado == pytest.approx(600)
    assert result.custo_fixo_por_item == pytest.approx(10)
    assert result.lucro_liquido == pytest.approx(28)
    assert result.produto_viavel is True
    assert alert_types(result) == []


def test_discount_applies_to_list_price():
    result = calculate_pricing(PricingInput(preco_cheio=200, desconto=25))
    assert result.preco_promocional == 150


def test_unviable_product_raises_critical_alert():
    result = calculate_pricing(PricingInput(custo_produto=90, preco_cheio=100))
    assert result.margem_contribuicao < 0
    assert "critico" in alert_types(result)


def test_new_product_absorbing_too_much():
    result = calculate_pricing(PricingInput(
        custo_produto=10, preco_cheio=100, papel_produto="novo", absorcao_manual=40,
    ))
    assert "alerta" in alert_types(result)


def test_margin_without_net_profit():
    result = calculate_pricing(PricingInput(
        custo_produto=40, preco_cheio=100, papel_produto="principal",
        volume_esperado_produto=10, custos_fixos_recorrentes=1000,
    ))
    assert result.margem_contribuicao > 0
    assert result.lucro_liquido < 0
    assert "info" in alert_types(result)
    assert "aviso" in alert_types(result)


def test_impossible_margin_flags_ideal_price():
    result = calculate_pricing(PricingInput(preco_cheio=100, margem_desejada=80))
    assert result.margem_inviavel is True
    assert result.preco_ideal == 0
