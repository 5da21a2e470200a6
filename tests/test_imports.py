import io
from datetime import datetime

import pytest
from openpyxl import Workbook

from sellerfin.models import RawOrder, TikTokSettlement, TikTokStatement
from sellerfin.services.import_service import (
    ImportService,
    ImportSession,
    ImportStateError,
    MappingError,
    build_order_rows,
    suggest_mapping,
    validate_mapping,
)
from sellerfin.services.tabular import (
    TabularFileError,
    find_sheet,
    make_headers_unique,
    parse_date_value,
    read_tabular_file,
    read_workbook,
)
from sellerfin.services.tiktok_import import (
    find_column_value,
    parse_all_settlements,
    parse_statements_sheet,
    parse_tiktok_orders,
)

SHOPEE_HEADERS = [
    "ID do pedido", "SKU do produto", "Nome do produto", "Nome da variação",
    "Quantidade", "Preço acordado", "Rebate da Shopee", "Data de criação do pedido",
]


def workbook_bytes(sheets):
    workbook = Workbook()
    workbook.remove(workbook.active)
    for title, rows in sheets.items():
        sheet = workbook.create_sheet(title)
        for row in rows:
            sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def shopee_rows():
    return [
        dict(zip(SHOPEE_HEADERS, ["250301A", "A", "Caneca", "Azul", "2", "59,80", "1,00", "2024-03-01 10:00"])),
        dict(zip(SHOPEE_HEADERS, ["250301B", "", "Prato", None, "1,4", "20", "0", "2024-03-02"])),
        dict(zip(SHOPEE_HEADERS, ["", "C", "Copo", None, "1", "10", "0", None])),
    ]


# ===================== FILES =====================

def test_csv_with_semicolons_and_latin1():
    content = "ID do pedido;Nome do produto;Preço acordado\n1;Caneca;10,50\n\n2;Prato;5\n".encode("latin-1")
    table = read_tabular_file("pedidos.csv", content)

    assert table.headers == ["ID do pedido", "Nome do produto", "Preço acordado"]
    assert table.rows[0] == {"ID do pedido": "1", "Nome do produto": "Caneca", "Preço acordado": "10,50"}
    assert len(table.rows) == 2


def test_xlsx_first_sheet_and_header_row():
    content = workbook_bytes({"orders": [[None, None], ["Pedido", "Valor"], ["1", 10.5], [None, None]]})
    table = read_tabular_file("pedidos.xlsx", content)

    assert table.sheet_name == "orders"
    assert table.headers == ["Pedido", "Valor"]
    assert table.rows == [{"Pedido": "1", "Valor": 10.5}]


def test_unsupported_and_corrupt_files():
    with pytest.raises(TabularFileError):
        read_tabular_file("pedidos.pdf", b"%PDF")
    with pytest.raises(TabularFileError):
        read_tabular_file("pedidos.xlsx", b"not a zip")


def test_duplicate_and_blank_headers():
    assert make_headers_unique(["Valor", " Valor ", None]) == ["Valor", "Valor__2", "Unnamed"]


def test_find_sheet_ignores_case():
    sheets = read_workbook(workbook_bytes({"Order details": [["a"], [1]], "Statements": [["b"], [2]]}))
    assert find_sheet(sheets, "order details").rows == [{"a": 1}]
    assert find_sheet(sheets, "missing") is None


def test_parse_date_value():
    assert parse_date_value("2024-03-01 10:00") == datetime(2024, 3, 1, 10, 0)
    assert parse_date_value("2024-03-01T13:00:00+03:00") == datetime(2024, 3, 1, 10, 0)
    assert parse_date_value("nope") is None
    assert parse_date_value("") is None


# ===================== MAPPING =====================

def test_suggest_mapping_matches_default_names():
    mapping = suggest_mapping(SHOPEE_HEADERS + ["", "Outra coluna"])
    assert mapping["order_id"] == "ID do pedido"
    assert mapping["total_faturado"] == "Preço acordado"
    assert mapping["data_pedido"] == "Data de criação do pedido"


def test_suggest_mapping_leaves_unknown_fields_empty():
    mapping = suggest_mapping(["Cliente", "Endereço"])
    assert set(mapping.values()) == {None}


def test_required_field_must_be_mapped():
    mapping = suggest_mapping(SHOPEE_HEADERS)
    mapping["quantidade"] = None
    with pytest.raises(MappingError) as exc:
        validate_mapping(mapping, SHOPEE_HEADERS)
    assert exc.value.field == "quantidade"
    assert str(exc.value) == 'O campo "Quantidade" é obrigatório e precisa ser mapeado'


def test_build_order_rows():
    rows = build_order_rows(shopee_rows(), suggest_mapping(SHOPEE_HEADERS))

    assert len(rows) == 2
    first, second = rows
    assert first["quantidade"] == 2
    assert first["total_faturado"] == pytest.approx(59.8)
    assert first["rebate_shopee"] == 1
    assert first["data_pedido"] == datetime(2024, 3, 1, 10, 0)
    assert second["sku"] is None
    assert second["quantidade"] == 1


# ===================== STATE MACHINE =====================

def test_session_blocks_preview_until_costs_are_known():
    session = ImportSession(known_costs={"A": 12})
    session.load(SHOPEE_HEADERS, shopee_rows())
    assert session.step == "mapping"

    missing = session.set_mapping(session.mapping)
    assert [m.key for m in missing] == ["Prato"]
    with pytest.raises(ImportStateError):
        session.preview()

    assert session.provide_costs({"Prato": 0}) != []
    assert session.provide_costs({"Prato": 4.5}) == []

    rows = session.preview()
    assert session.step == "preview"
    assert [r["custo_unitario"] for r in rows] == [12, 4.5]

    session.complete(len(rows))
    assert session.step == "success"
    session.reset()
    assert session.step == "upload"
    assert session.rows == []


def test_session_rejects_illegal_transitions():
    session = ImportSession()
    with pytest.raises(ImportStateError):
        session.complete(1)
    with pytest.raises(ImportStateError):
        session.load(SHOPEE_HEADERS, [])

    session.load(SHOPEE_HEADERS, shopee_rows())
    with pytest.raises(ImportStateError):
        session.complete(1)


def test_session_back_to_mapping_from_preview():
    session = ImportSession(known_costs={"A": 1, "Prato": 1})
    session.load(SHOPEE_HEADERS, shopee_rows())
    session.set_mapping(session.mapping)
    session.preview()
    session.back_to_mapping()
    assert session.step == "mapping"


# ===================== TIKTOK =====================

def tiktok_order_row(**fields):
    row = {
        "Order ID": "576543210987654321", "Seller SKU": "T1", "Product Name": "Fone",
        "Variation": "Preto", "Quantity": "2", "SKU Subtotal After Discount": "BRL 35,91",
        "SKU Platform Discount": "BRL 5,00", "SKU Seller Discount": "0",
        "Created Time": "01/03/2024 10:00:00", "Order Status": "Concluído",
    }
    row.update(fields)
    return row


def test_tiktok_order_rows_are_filtered():
    rows = [
        tiktok_order_row(),
        tiktok_order_row(**{"Order Status": "Cancelado"}),
        tiktok_order_row(**{"Order ID": "Rua das Flores, 10"}),
        tiktok_order_row(**{"Product Name": ""}),
    ]
    parsed = parse_tiktok_orders(rows)

    assert len(parsed) == 1
    order = parsed[0]
    assert order["total_faturado"] == pytest.approx(35.91)
    assert order["desconto_plataforma"] == 5
    assert order["quantidade"] == 2


def test_column_lookup_exact_normalized_and_partial():
    row = {"Total settlement amount": 1, "ICMS  DIFAL.": 2, "TikTok Shop commission fee (BRL)": 3}
    assert find_column_value(row, ["Total settlement amount"]) == 1
    assert find_column_value(row, ["ICMS DIFAL"]) == 2
    assert find_column_value(row, ["TikTok Shop commission fee"]) == 3
    assert find_column_value(row, ["Nada"]) is None


def test_settlement_rows_and_rejections():
    rows = [
        {"Type": "Order", "Order/adjustment ID": "5765", "Statement date": "2024-03-10",
         "Total settlement amount": "80,50", "TikTok Shop commission fee": "-6,00", "Quantity": "2"},
        {"Type": "Adjustment", "Order/adjustment ID": "9", "Total settlement amount": "1"},
        {"Type": "Order", "Order/adjustment ID": "", "Total settlement amount": "1"},
        {"Type": "Order", "Order/adjustment ID": "Order/adjustment ID"},
    ]
    settlements, summary = parse_all_settlements(rows)

    assert len(settlements) == 1
    settlement = settlements[0]
    assert settlement["order_id"] == "5765"
    assert settlement["total_settlement_amount"] == pytest.approx(80.5)
    assert settlement["tiktok_commission_fee"] == -6
    assert settlement["quantidade"] == 2
    assert settlement["statement_date"] == datetime(2024, 3, 10)
    assert summary.valid_records == 1
    assert summary.rejected_records == 3
    assert summary.rejection_reasons == {
        "Tipo inválido: Adjustment (esperado: Order)": 1,
        "ID do pedido vazio ou ausente": 1,
        "Linha de cabeçalho ignorada": 1,
    }


def test_statements_sheet_summary():
    rows = [
        {"Statement ID": "S1", "Statement date": "2024-03-05", "Total settlement amount": "100"},
        {"Statement ID": "S2", "Statement date": "2024-03-12", "Total settlement amount": "50,5"},
        {"Statement ID": "Statement ID"},
        {"Statement ID": None},
    ]
    statements, summary = parse_statements_sheet(rows)

    assert [s["statement_id"] for s in statements] == ["S1", "S2"]
    assert summary.total_settlement_amount == pytest.approx(150.5)
    assert summary.date_start == datetime(2024, 3, 5)
    assert summary.date_end == datetime(2024, 3, 12)


# ===================== PERSISTENCE =====================

def test_import_replaces_previous_orders_and_keeps_costs(db, user_id):
    db.add(RawOrder(user_id=user_id, order_id="old", sku="A", nome_produto="Caneca", quantidade=1, custo_unitario=12))
    db.commit()

    rows = build_order_rows(shopee_rows(), suggest_mapping(SHOPEE_HEADERS))
    stats = ImportService.import_shopee_orders(db, user_id, rows, replace_existing=True, costs={"Prato": 4})

    assert (stats.total, stats.imported, stats.errors) == (2, 2, 0)
    stored = {o.order_id: float(o.custo_unitario) for o in db.query(RawOrder).filter(RawOrder.user_id == user_id)}
    assert stored == {"250301A": 12, "250301B": 4}


def test_import_appends_when_not_replacing(db, user_id):
    rows = build_order_rows(shopee_rows(), suggest_mapping(SHOPEE_HEADERS))
    ImportService.import_shopee_orders(db, user_id, rows)
    ImportService.import_shopee_orders(db, user_id, rows, replace_existing=False)

    assert db.query(RawOrder).filter(RawOrder.user_id == user_id).count() == 4


def test_settlement_import_updates_statements_in_place(db, user_id):
    settlements = [{"order_id": "1", "type": "Order", "total_settlement_amount": 10}]
    statements = [{"statement_id": "S1", "total_settlement_amount": 10}]
    ImportService.import_tiktok_settlements(db, user_id, settlements, statements)

    result = ImportService.import_tiktok_settlements(
        db, user_id, settlements, [{"statement_id": "S1", "total_settlement_amount": 25}], replace_existing=False,
    )

    assert result.settlements.imported == 1
    assert db.query(TikTokSettlement).filter(TikTokSettlement.user_id == user_id).count() == 2
    statements = db.query(TikTokStatement).filter(TikTokStatement.user_id == user_id).all()
    assert [float(s.total_settlement_amount) for s in statements] == [25]
