from datetime import date, datetime
from types import SimpleNamespace

import pytest

from sellerfin.models import FixedCost, RawOrder, ShopeeSettings, TikTokOrder, TikTokSettlement
from sellerfin.services.dre import DREData, calculate_dre, format_dre_for_display, generate_alerts
from sellerfin.services.dre_service import DREService
from sellerfin.services.periods import custom_period

MARCH = custom_period(date(2024, 3, 1), date(2024, 3, 31))

SHOPEE = SimpleNamespace(
    taxa_comissao_shopee=0.10, adicional_por_item=0, percentual_nf_entrada=0,
    imposto_nf_saida=0, gasto_shopee_ads=0,
)


def shopee_order(day=15, **fields):
    base = {
        "sku": "A", "nome_produto": "Caneca", "quantidade": 3, "total_faturado": 1000,
        "custo_unitario": 100, "data_pedido": datetime(2024, 3, day, 12, 0),
    }
    base.update(fields)
    return base


def fields_of(alerts):
    return {a.campo: a.tipo for a in alerts}


def test_full_month_statement():
    dre = calculate_dre(
        [shopee_order()], [], [], [{"category": "Aluguel", "amount": 200}],
        SHOPEE, None, MARCH,
    )

    assert dre.receita_bruta_total == 1000
    assert dre.comissoes_marketplace == pytest.approx(100)
    assert dre.cogs_total == pytest.approx(300)
    assert dre.margem_contribuicao == pytest.approx(600)
    assert dre.fator_prorrateio == pytest.approx(1)
    assert dre.custos_fixos_prorrateados == pytest.approx(200)
    assert dre.lucro_operacional == pytest.approx(400)
    assert dre.margem_operacional == pytest.approx(40)
    assert dre.lucro_liquido == pytest.approx(400)
    assert fields_of(dre.alertas) == {"impostos_sobre_vendas_total": "warning"}


def test_orders_outside_period_are_ignored():
    orders = [shopee_order(day=1), shopee_order(day=31), shopee_order(data_pedido=datetime(2024, 4, 1))]
    dre = calculate_dre(orders, [], [], [], SHOPEE, None, MARCH)
    assert dre.receita_bruta_total == 2000


def test_half_month_prorates_fixed_costs():
    period = custom_period(date(2024, 4, 1), date(2024, 4, 15))
    dre = calculate_dre([], [], [], [{"category": "Aluguel", "amount": 300}], None, None, period)

    assert dre.fator_prorrateio == pytest.approx(0.5)
    assert dre.custos_fixos_total == 300
    assert dre.custos_fixos_prorrateados == pytest.approx(150)
    assert dre.custos_fixos_por_categoria == {"Aluguel": pytest.approx(150)}
    assert fields_of(dre.alertas) == {"receita_bruta_total": "warning"}


def test_tiktok_settlement_lines():
    tiktok_settings = SimpleNamespace(percentual_nf_entrada=0.10, imposto_nf_saida=0.05, gasto_tiktok_ads=50)
    orders = [{
        "sku": "T", "nome_produto": "Fone", "quantidade": 2, "total_faturado": 400, "custo_unitario": 50,
        "desconto_plataforma": 30, "desconto_vendedor": 10, "data_pedido": datetime(2024, 3, 5),
    }]
    settlements = [
        {
            "type": "Order", "statement_date": datetime(2024, 3, 10),
            "tiktok_commission_fee": -24, "affiliate_commission": -12, "sfp_service_fee": -8,
            "icms_difal": -6, "icms_penalty": -1,
            "tiktok_shipping_fee": -20, "customer_shipping_fee": 5, "shipping_subsidy": 5,
        },
        {"type": "Refund", "statement_date": datetime(2024, 3, 12), "refund_subtotal": -40},
    ]
    dre = calculate_dre([], orders, settlements, [], None, tiktok_settings, MARCH)

    assert dre.receita_bruta_tiktok == 400
    assert dre.icms == pytest.approx(7)
    assert dre.iss_simples == pytest.approx(20)
    assert dre.devolucoes == pytest.approx(40)
    assert dre.receita_liquida == pytest.approx(400 - 27 - 40)
    assert dre.custo_produtos == pytest.approx(100)
    assert dre.nf_entrada == pytest.approx(10)
    assert dre.custo_frete_envio == pytest.approx(10)
    assert dre.comissoes_marketplace == pytest.approx(24)
    assert dre.comissoes_afiliados == pytest.approx(12)
    assert dre.taxas_servicos == pytest.approx(8)
    assert dre.ads_marketing == 50
    assert dre.desconto_plataforma_tiktok == 30
    assert dre.desconto_vendedor_tiktok == 10
    # Discounts are memo lines only
    assert dre.margem_contribuicao == pytest.approx(333 - 120 - 94)


def test_zero_revenue_percentages_are_zero():
    dre = calculate_dre([], [], [], [], None, None, MARCH)
    assert dre.margem_liquida == 0
    assert dre.alertas == []


def test_alerts_for_missing_settings_and_costs():
    dre = DREData(periodo=MARCH, receita_bruta_shopee=100, receita_bruta_tiktok=50, receita_bruta_total=150)
    alerts = fields_of(generate_alerts(dre, has_shopee_settings=False, has_tiktok_settings=False))

    assert alerts["shopee_settings"] == "warning"
    assert alerts["tiktok_settings"] == "warning"
    assert alerts["cogs_total"] == "error"
    assert alerts["custos_fixos_total"] == "info"


def test_alerts_for_negative_results():
    negative_margin = DREData(periodo=MARCH, receita_bruta_total=100, impostos_sobre_vendas_total=5,
                              cogs_total=200, margem_contribuicao=-100, lucro_operacional=-150,
                              custos_fixos_total=50)
    assert fields_of(generate_alerts(negative_margin)) == {"margem_contribuicao": "error"}

    fixed_costs_too_high = DREData(periodo=MARCH, receita_bruta_total=100, impostos_sobre_vendas_total=5,
                                   cogs_total=20, margem_contribuicao=30, lucro_operacional=-20,
                                   custos_fixos_total=50)
    assert fields_of(generate_alerts(fixed_costs_too_high)) == {"lucro_operacional": "warning"}


def test_display_sections():
    dre = calculate_dre([shopee_order()], [], [], [{"category": "Aluguel", "amount": 200}], SHOPEE, None, MARCH)
    sections = format_dre_for_display(dre)

    assert len(sections) == 13
    assert sections[0].total.value == 1000
    assert sections[0].total.percentage == 100
    cogs = sections[4]
    assert cogs.total.value == pytest.approx(-300)
    assert cogs.total.percentage == pytest.approx(-30)
    assert sections[8].title == "CUSTOS FIXOS (prorrateado: 31 dias)"
    assert sections[8].items[0].label == "Aluguel"
    assert sections[-1].title == "INFORMATIVO: DESCONTOS TIKTOK"
    assert sections[-1].total is None


def test_service_reads_everything_of_the_user(db, user_id):
    db.add(RawOrder(user_id=user_id, order_id="1", sku="A", nome_produto="Caneca", quantidade=3,
                    total_faturado=1000, custo_unitario=100, data_pedido=datetime(2024, 3, 15)))
    db.add(TikTokOrder(user_id=user_id, order_id="2", sku="T", nome_produto="Fone", quantidade=1,
                       total_faturado=200, data_pedido=datetime(2024, 3, 15)))
    db.add(TikTokSettlement(user_id=user_id, order_id="2", type="Order", statement_date=datetime(2024, 3, 16),
                            tiktok_commission_fee=-12))
    db.add(FixedCost(user_id=user_id, category="Aluguel", name="Sala", amount=200))
    db.add(ShopeeSettings(user_id=user_id, name="Padrão", taxa_comissao_shopee=0.10, is_default=True))
    db.commit()

    dre = DREService.get_dre(db, user_id, MARCH)

    assert dre.receita_bruta_shopee == 1000
    assert dre.receita_bruta_tiktok == 200
    assert dre.comissoes_marketplace == pytest.approx(112)
    assert dre.custos_fixos_prorrateados == pytest.approx(200)
    assert "tiktok_settings" in fields_of(dre.alertas)
