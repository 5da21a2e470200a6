from datetime import datetime

import pytest

from sellerfin.models import TikTokSettlement, TikTokStatement
from sellerfin.services.export_service import export_tiktok_settlements
from sellerfin.services.results_service import ResultsService
from sellerfin.services.tiktok_payments import filter_settlements, summarize_settlements, summarize_statements

ORDER = {
    "order_id": "576", "type": "Order", "sku_id": "SK1", "nome_produto": "Fone", "variacao": "Preto",
    "quantidade": 2, "total_settlement_amount": 80, "subtotal_before_discounts": 110,
    "customer_payment": 100, "net_sales": 95, "total_fees": -15, "seller_discounts": -5,
    "seller_cofunded_discount": -2, "platform_discounts": -8, "platform_cofunded_discount": 1,
    "customer_shipping_fee": 10, "tiktok_shipping_fee": -12, "shipping_incentive": 4,
    "refunded_shipping": 0, "affiliate_commission": -3.5,
    "statement_date": datetime(2024, 3, 10), "data_criacao_pedido": datetime(2024, 3, 1),
}

REFUND = {
    "order_id": "577", "type": "Refund", "sku_id": "SK2", "nome_produto": "Capa", "variacao": None,
    "quantidade": 1, "total_settlement_amount": -20, "refund_subtotal": -20, "customer_refund": -5,
    "refunded_shipping": -3, "statement_date": datetime(2024, 3, 12),
}


def add_settlements(db, user_id, *rows):
    db.add_all([TikTokSettlement(user_id=user_id, **row) for row in rows])
    db.commit()


# ===================== SUMMARIES =====================

def test_settlement_summary_uses_absolute_deductions():
    summary = summarize_settlements([ORDER, REFUND])

    assert summary.total_recebido == pytest.approx(60)
    assert summary.vendas_brutas == pytest.approx(110)
    assert summary.total_taxas == pytest.approx(15)
    assert summary.total_reembolsos == pytest.approx(25)
    assert summary.descontos_vendedor == pytest.approx(7)
    assert summary.descontos_plataforma == pytest.approx(9)
    # 10 - 12 + 4 for the order, -3 for the refunded shipping
    assert summary.saldo_frete == pytest.approx(-1)
    assert summary.quantidade_registros == 2
    assert summary.quantidade_pedidos == 1
    assert summary.quantidade_reembolsos == 1


def test_statement_summary_and_period():
    summary = summarize_statements([
        {"statement_date": datetime(2024, 3, 8), "total_settlement_amount": 100, "net_sales": 120,
         "total_fees": -20, "shipping_total": 5, "adjustment_amount": -1},
        {"statement_date": datetime(2024, 3, 1), "total_settlement_amount": 50, "net_sales": 60,
         "total_fees": 10, "shipping_total": 0, "adjustment_amount": 2},
    ])

    assert summary.total_recebido == pytest.approx(150)
    assert summary.total_taxas == pytest.approx(30)
    assert summary.ajustes == pytest.approx(1)
    assert summary.quantidade_extratos == 2
    assert summary.periodo_inicio == datetime(2024, 3, 1)
    assert summary.periodo_fim == datetime(2024, 3, 8)


def test_empty_summaries():
    assert summarize_statements([]).periodo_inicio is None
    assert summarize_settlements([]).total_recebido == 0


def test_filter_by_type_and_search():
    rows = [ORDER, REFUND]
    assert filter_settlements(rows, type="refund") == [REFUND]
    assert filter_settlements(rows, search="preto") == [ORDER]
    assert filter_settlements(rows, search="sk2") == [REFUND]
    assert filter_settlements(rows, type="Order", search="577") == []
    assert filter_settlements(rows) == rows


# ===================== SERVICE / EXPORT =====================

def test_payments_are_newest_first_and_scoped(db, user_id):
    from uuid import uuid4
    add_settlements(db, user_id, ORDER, REFUND)
    add_settlements(db, uuid4(), ORDER)
    db.add(TikTokStatement(user_id=user_id, statement_id="S1", statement_date=datetime(2024, 3, 12)))
    db.commit()

    statements, settlements = ResultsService.get_tiktok_payments(db, user_id)

    assert [s.statement_id for s in statements] == ["S1"]
    assert [s.order_id for s in settlements] == ["577", "576"]


def test_settlement_csv(db, user_id):
    add_settlements(db, user_id, ORDER)
    _, settlements = ResultsService.get_tiktok_payments(db, user_id)

    lines = export_tiktok_settlements(settlements).splitlines()

    assert lines[0].startswith("ID do Pedido;ID do Pagamento;")
    assert lines[1] == "576;-;-;2;Fone;Preto;01/03/2024;-;10/03/2024;80.00;95.00;3.50"


def test_payments_api(client, db, user_id):
    add_settlements(db, user_id, ORDER, REFUND)

    body = client.get("/api/tiktok/payments", params={"type": "Order"}).json()
    assert [s["order_id"] for s in body["settlements"]] == ["576"]
    assert body["settlements_summary"]["total_recebido"] == pytest.approx(80)
    assert body["statements"] == []

    export = client.get("/api/tiktok/payments/export", params={"search": "capa"})
    assert export.status_code == 200
    text = export.content.decode("utf-8")
    assert text.startswith("\ufeffID do Pedido;")
    assert len(text.strip().splitlines()) == 2
    assert "pagamentos_tiktok_" in export.headers["content-disposition"]
