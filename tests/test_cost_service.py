import asyncio
from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from sellerfin.models import RawOrder, TikTokOrder
from sellerfin.services.calculations import calculate_results
from sellerfin.services.cost_service import (
    CostSaveDebouncer,
    CostService,
    EditableCost,
    apply_cost_to_orders,
    find_missing_costs,
    sync_tracker,
)
from sellerfin.services.results_service import ResultsService


def add_orders(db, user_id, *rows, model=RawOrder):
    for index, row in enumerate(rows):
        db.add(model(user_id=user_id, order_id=f"P{index}", quantidade=1, total_faturado=10, **row))
    db.commit()


def costs_by_key(db, user_id, model=RawOrder):
    return {
        (o.sku, o.nome_produto): float(o.custo_unitario)
        for o in db.query(model).filter(model.user_id == user_id)
    }


def test_update_by_sku_touches_every_line(db, user_id):
    add_orders(db, user_id,
               {"sku": "A", "nome_produto": "Caneca"},
               {"sku": "A", "nome_produto": "Caneca"},
               {"sku": "B", "nome_produto": "Copo"})

    count = CostService.update_unit_cost(db, user_id, "A", "Caneca", 12.5)

    assert count == 2
    costs = costs_by_key(db, user_id)
    assert costs[("A", "Caneca")] == 12.5
    assert costs[("B", "Copo")] == 0


def test_update_without_sku_matches_by_name(db, user_id):
    add_orders(db, user_id,
               {"sku": "", "nome_produto": "Caneca"},
               {"sku": "-", "nome_produto": "Caneca"},
               {"sku": "X", "nome_produto": "Caneca"})

    assert CostService.update_unit_cost(db, user_id, None, "Caneca", 7) == 2
    assert costs_by_key(db, user_id)[("X", "Caneca")] == 0


def test_update_is_scoped_to_user(db, user_id):
    from uuid import uuid4
    other = uuid4()
    add_orders(db, user_id, {"sku": "A", "nome_produto": "Caneca"})
    add_orders(db, other, {"sku": "A", "nome_produto": "Caneca"})

    CostService.update_unit_cost(db, user_id, "A", None, 3)

    assert costs_by_key(db, other)[("A", "Caneca")] == 0


def test_update_rejects_negative_or_unidentified(db, user_id):
    with pytest.raises(ValueError):
        CostService.update_unit_cost(db, user_id, "A", None, -1)
    with pytest.raises(ValueError):
        CostService.update_unit_cost(db, user_id, "", "", 5)


def test_update_tiktok_orders(db, user_id):
    add_orders(db, user_id, {"sku": "T1", "nome_produto": "Fone"}, model=TikTokOrder)
    assert CostService.update_unit_cost(db, user_id, "T1", None, 20, "tiktok") == 1
    assert costs_by_key(db, user_id, TikTokOrder)[("T1", "Fone")] == 20


def test_batch_update_success_bumps_sync_version(db, user_id):
    add_orders(db, user_id,
               {"sku": "A", "nome_produto": "Caneca"},
               {"sku": "B", "nome_produto": "Copo"},
               {"sku": None, "nome_produto": "Prato"})
    before = sync_tracker.current(user_id)

    result = CostService.batch_update_costs(
        db, user_id,
        [{"sku": "A"}, {"sku": "B"}, {"sku": None, "nome_produto": "Prato"}],
        9.9,
    )

    assert result.status == "success"
    assert result.updated_groups == 3
    assert result.failed_groups == 0
    assert result.rows_updated == 3
    assert result.sync_version == before + 1
    assert set(costs_by_key(db, user_id).values()) == {9.9}


def test_batch_cost_reaches_results_after_reload(db, user_id):
    add_orders(db, user_id,
               {"sku": "A", "nome_produto": "Caneca"},
               {"sku": "A", "nome_produto": "Caneca", "custo_unitario": 3},
               {"sku": None, "nome_produto": "Prato"},
               {"sku": "C", "nome_produto": "Copo", "custo_unitario": 1})

    CostService.batch_update_costs(db, user_id, [{"sku": "A"}, {"sku": None, "nome_produto": "Prato"}], 7.25)
    db.expire_all()
    _, result = ResultsService.get_shopee_results(db, user_id)

    costs = {g.nome_produto: g.custo_unitario_medio for g in result.groups}
    assert costs["Caneca"] == pytest.approx(7.25)
    assert costs["Prato"] == pytest.approx(7.25)
    assert costs["Copo"] == pytest.approx(1)


def test_batch_update_requires_positive_cost(db, user_id):
    with pytest.raises(ValueError):
        CostService.batch_update_costs(db, user_id, [{"sku": "A"}], 0)


def test_batch_update_reports_partial_failure(db, user_id, monkeypatch):
    add_orders(db, user_id,
               {"sku": "A", "nome_produto": "Caneca"},
               {"sku": None, "nome_produto": "Prato"})
    real_commit = db.commit
    calls = []

    def flaky_commit():
        calls.append(1)
        if len(calls) == 2:
            raise OperationalError("UPDATE", {}, Exception("database is locked"))
        real_commit()

    monkeypatch.setattr(db, "commit", flaky_commit)
    before = sync_tracker.current(user_id)

    result = CostService.batch_update_costs(
        db, user_id, [{"sku": "A"}, {"nome_produto": "Prato"}], 5,
    )

    assert result.status == "partial"
    assert result.updated_groups == 1
    assert result.failed_groups == 1
    assert result.updated_skus == ["A"]
    assert result.updated_names == []
    assert result.sync_version == before + 1


def test_batch_update_total_failure_keeps_version(db, user_id, monkeypatch):
    add_orders(db, user_id, {"sku": "A", "nome_produto": "Caneca"})

    def failing_commit():
        raise OperationalError("UPDATE", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", failing_commit)
    before = sync_tracker.current(user_id)

    result = CostService.batch_update_costs(db, user_id, [{"sku": "A"}], 5)

    assert result.status == "failed"
    assert result.sync_version == before


def test_apply_cost_to_orders_recomputes_profit():
    orders = [
        {"sku": "A", "nome_produto": "Caneca", "quantidade": 2, "total_faturado": 100},
        {"sku": "", "nome_produto": "Prato", "quantidade": 1, "total_faturado": 50},
        {"sku": "B", "nome_produto": "Copo", "quantidade": 1, "total_faturado": 30},
    ]
    patched = apply_cost_to_orders(orders, 10, skus=["A"], names=["Prato"])

    assert [line.custo_unitario for line in patched] == [10, 10, 0]
    result = calculate_results(patched, None)
    assert result.totals.total_gasto_produtos == 30


def test_find_missing_costs_sums_quantity():
    rows = [
        {"sku": "A", "nome_produto": "Caneca", "quantidade": 2},
        {"sku": "A", "nome_produto": "Caneca", "quantidade": 3},
        {"sku": "B", "nome_produto": "Copo", "quantidade": 1},
        {"sku": "", "nome_produto": "Prato", "quantidade": 1, "custo_unitario": 4},
    ]
    missing = find_missing_costs(rows, {"B": 8})

    assert len(missing) == 1
    assert missing[0].key == "A"
    assert missing[0].quantidade == 5


def test_known_costs_by_product_key(db, user_id):
    add_orders(db, user_id,
               {"sku": "A", "nome_produto": "Caneca", "custo_unitario": 3},
               {"sku": "", "nome_produto": "Prato", "custo_unitario": 2},
               {"sku": "C", "nome_produto": "Copo"})

    assert CostService.known_costs(db, user_id) == {"A": 3.0, "Prato": 2.0}


def test_known_costs_latest_edit_wins(db, user_id):
    imported = datetime(2024, 3, 1, 12, 0)
    db.add_all([
        RawOrder(user_id=user_id, order_id="P1", sku="A", nome_produto="Caneca", quantidade=1,
                 custo_unitario=5, created_at=imported, updated_at=datetime(2024, 3, 5)),
        RawOrder(user_id=user_id, order_id="P2", sku="A", nome_produto="Caneca", quantidade=1,
                 custo_unitario=3, created_at=imported, updated_at=imported),
    ])
    db.commit()

    assert CostService.known_costs(db, user_id) == {"A": 5.0}


# ===================== EDITING STATE =====================

def test_local_edit_survives_same_version_refresh():
    field = EditableCost(10, sync_version=1, sku="A")
    assert field.type("12,50") == 12.5

    assert field.refresh(10, 1, sku="A") is False
    assert field.text == "12,50"


def test_newer_sync_version_overrides_local_edit():
    field = EditableCost(10, sync_version=1, sku="A")
    field.type("12,50")

    assert field.refresh(9.9, 2, sku="A") is True
    assert field.text == "9,90"
    assert field.has_ever_edited is False


def test_rebinding_to_another_product_resyncs():
    field = EditableCost(10, sync_version=1, sku="A")
    field.type("99")

    assert field.refresh(4, 1, sku="B") is True
    assert field.value == 4


def test_untouched_field_follows_server():
    field = EditableCost(0, sync_version=1, sku="A")
    assert field.text == ""
    assert field.refresh(3, 1, sku="A") is True
    assert field.text == "3,00"


def test_invalid_typing_saves_zero():
    field = EditableCost(5)
    assert field.type("abc") == 0


@pytest.mark.asyncio
async def test_debouncer_keeps_only_last_value():
    saved = []

    async def save(sku, nome_produto, cost):
        saved.append((sku, cost))

    debouncer = CostSaveDebouncer(save, delay=0.01)
    debouncer.submit("A", None, 1)
    debouncer.submit("A", None, 2)
    debouncer.submit("B", None, 7)
    assert debouncer.pending_count == 2

    await debouncer.flush()

    assert sorted(saved) == [("A", 2), ("B", 7)]
    assert debouncer.pending_count == 0


@pytest.mark.asyncio
async def test_debouncer_cancel_all_drops_pending_writes():
    saved = []

    async def save(sku, nome_produto, cost):
        saved.append(cost)

    debouncer = CostSaveDebouncer(save, delay=0.05)
    debouncer.submit("A", None, 1)
    debouncer.cancel_all()
    await asyncio.sleep(0.1)

    assert saved == []


def test_editable_cost_shows_thousands_and_reads_them_back():
    field = EditableCost(1234.5)
    assert field.text == "1.234,50"
    assert field.value == pytest.approx(1234.5)
