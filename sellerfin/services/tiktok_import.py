"""
TikTok Shop file parsing: order export CSV, settlement "Order details" sheet
and "Statements" sheet.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .calculations import to_number
from .tabular import parse_date_value

logger = logging.getLogger(__name__)

ORDER_ID_PATTERN = re.compile(r"^\d{15,}$")

EXCLUDED_STATUSES = ("Cancelado", "Não pago")

ORDER_COLUMNS = {
    "order_id": "Order ID",
    "sku": "Seller SKU",
    "nome_produto": "Product Name",
    "variacao": "Variation",
    "quantidade": "Quantity",
    "total_faturado": "SKU Subtotal After Discount",
    "desconto_plataforma": "SKU Platform Discount",
    "desconto_vendedor": "SKU Seller Discount",
    "data_pedido": "Created Time",
    "status_pedido": "Order Status",
}

ORDER_DETAILS_SHEETS = ("order details", "detalhes_pedido")
STATEMENTS_SHEETS = ("statements",)

SETTLEMENT_COLUMNS: Dict[str, List[str]] = {
    # Basic info
    "statement_date": ["Statement date", "Data do extrato"],
    "statement_id": ["Statement ID", "ID do extrato"],
    "payment_id": ["Payment ID", "ID do pagamento"],
    "status": ["Status"],
    "type": ["Type", "Tipo"],
    "currency": ["Currency", "Moeda"],

    # Order info
    "order_id": ["Order/adjustment ID", "Order ID", "ID do pedido", "ID do pedido/ajuste"],
    "related_order_id": ["Related order ID", "ID do pedido relacionado"],
    "sku_id": ["SKU ID", "ID do SKU"],
    "quantidade": ["Quantity", "Quantidade", "Qty"],
    "nome_produto": ["Product name", "Nome do produto"],
    "variacao": ["SKU name", "Nome do SKU", "Variation", "Variação"],

    # Dates
    "data_criacao_pedido": ["Order created date", "Data de criação do pedido", "Created date"],
    "data_entrega": ["Order delivery date", "Data de entrega", "Delivery date"],

    # Delivery info
    "delivery_option": ["Delivery option", "Opção de entrega"],
    "collection_method": ["Collection methods", "Collection method", "Método de coleta"],
    "chargeable_weight": ["Chargeable package weight", "Peso tarifável"],

    # Main amounts
    "total_settlement_amount": ["Total settlement amount", "Valor total de liquidação", "Settlement amount"],
    "customer_payment": ["Customer payment", "Pagamento do cliente"],
    "customer_refund": ["Customer refund", "Reembolso do cliente"],
    "net_sales": ["Net sales", "Vendas líquidas"],
    "subtotal_before_discounts": ["Subtotal before discounts", "Subtotal antes dos descontos"],
    "refund_subtotal": ["Refund subtotal before seller discounts", "Subtotal de reembolso"],

    # Seller discounts
    "seller_discounts": ["Seller discounts", "Descontos do vendedor"],
    "seller_cofunded_discount": ["Seller co-funded voucher discount", "Desconto de voucher co-financiado pelo vendedor"],
    "seller_cofunded_discount_refund": ["Seller co-funded voucher discount refund", "Reembolso de desconto co-financiado"],
    "refund_seller_discounts": ["Refund of seller discounts", "Reembolso de descontos do vendedor"],

    # Platform discounts
    "platform_discounts": ["Platform discounts", "Descontos da plataforma"],
    "platform_cofunded_discount": ["Platform co-funded voucher discounts", "Descontos co-financiados pela plataforma"],
    "platform_discounts_refund": ["Platform discounts refund", "Reembolso de descontos da plataforma"],

    # Shipping
    "shipping_total": ["Shipping", "Frete"],
    "tiktok_shipping_fee": ["TikTok Shop shipping fee", "Taxa de frete TikTok Shop"],
    "customer_shipping_fee": ["Customer shipping fee", "Frete do cliente"],
    "refunded_shipping": ["Refunded customer shipping fee", "Frete reembolsado"],
    "shipping_incentive": ["TikTok Shop shipping incentive", "Incentivo de frete TikTok Shop"],
    "shipping_incentive_refund": ["TikTok Shop shipping incentive refund", "Reembolso de incentivo de frete"],
    "shipping_subsidy": ["Shipping subsidy", "Subsídio de frete"],
    "actual_return_shipping_fee": ["Actual return shipping fee", "Taxa real de devolução de frete"],

    # Fees
    "total_fees": ["Fees", "Taxas"],
    "tiktok_commission_fee": ["TikTok Shop commission fee", "Taxa de comissão TikTok Shop", "Commission fee"],
    "affiliate_commission": ["Affiliate commission", "Comissão de afiliado"],
    "affiliate_partner_commission": ["Affiliate partner commission", "Comissão de parceiro afiliado"],
    "affiliate_shop_ads_commission": ["Affiliate Shop Ads commission", "Comissão de anúncios de afiliados"],
    "sfp_service_fee": ["SFP service fee", "Taxa de serviço SFP"],
    "fee_per_item": ["Fee per item sold", "Taxa por item vendido", "Fee per item"],
    "live_specials_fee": ["LIVE Specials service fee", "Taxa de serviço LIVE Specials"],
    "voucher_xtra_fee": ["Voucher Xtra service fee", "Taxa de serviço Voucher Xtra"],
    "bonus_cashback_fee": ["Bonus cashback service fee", "Taxa de serviço de cashback"],

    # Taxes
    "icms_difal": ["ICMS DIFAL"],
    "icms_penalty": ["ICMS penalty", "Penalidade ICMS"],

    # Adjustments
    "adjustment_amount": ["Adjustment amount", "Valor de ajuste"],
    "adjustment_reason": ["Adjustment reasons", "Adjustment reason", "Motivo do ajuste"],
}

SETTLEMENT_TEXT_FIELDS = (
    "statement_id", "payment_id", "status", "type", "related_order_id", "sku_id",
    "nome_produto", "variacao", "delivery_option", "collection_method", "adjustment_reason",
)
SETTLEMENT_DATE_FIELDS = ("statement_date", "data_criacao_pedido", "data_entrega")
SETTLEMENT_AMOUNT_FIELDS = tuple(
    name for name in SETTLEMENT_COLUMNS
    if name not in SETTLEMENT_TEXT_FIELDS + SETTLEMENT_DATE_FIELDS + ("order_id", "quantidade", "currency")
)

STATEMENT_COLUMNS: Dict[str, List[str]] = {
    "statement_id": ["Statement ID", "ID do extrato"],
    "statement_date": ["Statement date", "Data do extrato"],
    "payment_id": ["Payment ID", "ID do pagamento"],
    "status": ["Status"],
    "currency": ["Currency", "Moeda"],
    "total_settlement_amount": ["Total settlement amount", "Valor total de liquidação", "Settlement amount"],
    "net_sales": ["Net sales", "Vendas líquidas"],
    "total_fees": ["Fees", "Taxas", "Total fees"],
    "customer_payment": ["Customer payment", "Pagamento do cliente"],
    "seller_discounts": ["Seller discounts", "Descontos do vendedor"],
    "platform_discounts": ["Platform discounts", "Descontos da plataforma"],
    "shipping_total": ["Shipping", "Frete"],
    "refund_subtotal": ["Refund", "Reembolso", "Refund subtotal"],
    "adjustment_amount": ["Adjustment", "Ajuste", "Adjustment amount"],
}

STATEMENT_AMOUNT_FIELDS = (
    "total_settlement_amount", "net_sales", "total_fees", "customer_payment", "seller_discounts",
    "platform_discounts", "shipping_total", "refund_subtotal", "adjustment_amount",
)


@dataclass
class SettlementRowResult:
    data: Optional[Dict[str, Any]] = None
    rejection_reason: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.data is not None


@dataclass
class SettlementImportSummary:
    total_rows: int = 0
    valid_records: int = 0
    rejected_records: int = 0
    rejection_reasons: Dict[str, int] = field(default_factory=dict)
    found_columns: List[str] = field(default_factory=list)
    missing_columns: List[str] = field(default_factory=list)


@dataclass
class StatementsImportSummary:
    total_rows: int = 0
    valid_records: int = 0
    total_settlement_amount: float = 0
    date_start: Optional[datetime] = None
    date_end: Optional[datetime] = None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _int_or_one(value: Any) -> int:
    number = int(to_number(value))
    return number or 1


# ===================== ORDERS =====================

def parse_tiktok_order_row(row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """One row of the TikTok order export, None when the row is not a sold item"""
    status = _text(row.get(ORDER_COLUMNS["status_pedido"])) or ""
    if status in EXCLUDED_STATUSES:
        return None

    # Real order ids are 15+ digits; addresses and phones spill into other lines
    order_id = _text(row.get(ORDER_COLUMNS["order_id"]))
    if not order_id or not ORDER_ID_PATTERN.match(order_id):
        return None

    nome_produto = _text(row.get(ORDER_COLUMNS["nome_produto"]))
    if not nome_produto:
        return None

    return {
        "order_id": order_id,
        "sku": _text(row.get(ORDER_COLUMNS["sku"])),
        "nome_produto": nome_produto,
        "variacao": _text(row.get(ORDER_COLUMNS["variacao"])),
        "quantidade": _int_or_one(row.get(ORDER_COLUMNS["quantidade"])),
        "total_faturado": to_number(row.get(ORDER_COLUMNS["total_faturado"])),
        "desconto_plataforma": to_number(row.get(ORDER_COLUMNS["desconto_plataforma"])),
        "desconto_vendedor": to_number(row.get(ORDER_COLUMNS["desconto_vendedor"])),
        "data_pedido": parse_date_value(row.get(ORDER_COLUMNS["data_pedido"])),
        "status_pedido": status or None,
    }


def parse_tiktok_orders(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    parsed = [p for p in (parse_tiktok_order_row(row) for row in rows) if p is not None]
    logger.info(f"TikTok orders: {len(parsed)} of {len(rows)} rows accepted")
    return parsed


# ===================== SETTLEMENTS =====================

def normalize_column_name(name: str) -> str:
    """Lowercase, single spaces, no punctuation"""
    collapsed = re.sub(r"\s+", " ", str(name).lower().strip())
    return re.sub(r"[^\w\s]", "", collapsed)


def find_column_value(row: Dict[str, Any], aliases: List[str]) -> Any:
    """
    Value of the first matching column: exact alias, then normalized name,
    then partial containment (both names longer than 3 chars).
    """
    for alias in aliases:
        if alias in row:
            return row[alias]

    normalized_aliases = [normalize_column_name(a) for a in aliases]
    for key in row:
        if normalize_column_name(key) in normalized_aliases:
            return row[key]

    for key in row:
        normalized_key = normalize_column_name(key)
        for alias in normalized_aliases:
            if (alias in normalized_key or normalized_key in alias) and len(normalized_key) > 3 and len(alias) > 3:
                return row[key]

    return None


def analyze_columns(row: Dict[str, Any]) -> Dict[str, List[str]]:
    found, missing = [], []
    for name, aliases in SETTLEMENT_COLUMNS.items():
        (found if find_column_value(row, aliases) is not None else missing).append(name)
    return {"found_columns": found, "missing_columns": missing, "file_columns": list(row)}


def parse_settlement_row(row: Dict[str, Any]) -> SettlementRowResult:
    """Only rows of type Order with an order id are settlements"""
    raw_type = find_column_value(row, SETTLEMENT_COLUMNS["type"])
    if (_text(raw_type) or "").lower() != "order":
        return SettlementRowResult(rejection_reason=f"Tipo inválido: {_text(raw_type) or 'vazio'} (esperado: Order)")

    order_id = _text(find_column_value(row, SETTLEMENT_COLUMNS["order_id"]))
    if not order_id:
        return SettlementRowResult(rejection_reason="ID do pedido vazio ou ausente")

    lowered = order_id.lower()
    if lowered in ("order/adjustment id", "order id", "id do pedido") or ("order" in lowered and "id" in lowered):
        return SettlementRowResult(rejection_reason="Linha de cabeçalho ignorada")

    data: Dict[str, Any] = {
        "order_id": order_id,
        "currency": _text(find_column_value(row, SETTLEMENT_COLUMNS["currency"])) or "BRL",
        "quantidade": _int_or_one(find_column_value(row, SETTLEMENT_COLUMNS["quantidade"])),
    }
    for name in SETTLEMENT_TEXT_FIELDS:
        data[name] = _text(find_column_value(row, SETTLEMENT_COLUMNS[name]))
    for name in SETTLEMENT_DATE_FIELDS:
        data[name] = parse_date_value(find_column_value(row, SETTLEMENT_COLUMNS[name]))
    # Zero, negative and empty amounts are kept as-is
    for name in SETTLEMENT_AMOUNT_FIELDS:
        data[name] = to_number(find_column_value(row, SETTLEMENT_COLUMNS[name]))

    return SettlementRowResult(data=data)


def parse_all_settlements(rows: List[Dict[str, Any]]):
    """Returns (settlements, SettlementImportSummary)"""
    settlements: List[Dict[str, Any]] = []
    summary = SettlementImportSummary(total_rows=len(rows))

    if rows:
        analysis = analyze_columns(rows[0])
        summary.found_columns = analysis["found_columns"]
        summary.missing_columns = analysis["missing_columns"]

    for row in rows:
        result = parse_settlement_row(row)
        if result.success:
            settlements.append(result.data)
        elif result.rejection_reason:
            reasons = summary.rejection_reasons
            reasons[result.rejection_reason] = reasons.get(result.rejection_reason, 0) + 1

    summary.valid_records = len(settlements)
    summary.rejected_records = len(rows) - len(settlements)
    logger.info(
        f"TikTok settlements: {summary.valid_records} valid, {summary.rejected_records} rejected "
        f"({summary.rejection_reasons})"
    )
    if summary.missing_columns:
        logger.debug(f"Settlement columns not found: {summary.missing_columns}")
    return settlements, summary


def parse_statements_sheet(rows: List[Dict[str, Any]]):
    """Returns (statements, StatementsImportSummary)"""
    statements: List[Dict[str, Any]] = []
    summary = StatementsImportSummary(total_rows=len(rows))

    for row in rows:
        statement_id = _text(find_column_value(row, STATEMENT_COLUMNS["statement_id"]))
        if not statement_id or "statement" in statement_id.lower():
            continue

        statement = {
            "statement_id": statement_id,
            "statement_date": parse_date_value(find_column_value(row, STATEMENT_COLUMNS["statement_date"])),
            "payment_id": _text(find_column_value(row, STATEMENT_COLUMNS["payment_id"])),
            "status": _text(find_column_value(row, STATEMENT_COLUMNS["status"])),
            "currency": _text(find_column_value(row, STATEMENT_COLUMNS["currency"])) or "BRL",
        }
        for name in STATEMENT_AMOUNT_FIELDS:
            statement[name] = to_number(find_column_value(row, STATEMENT_COLUMNS[name]))
        statements.append(statement)

        summary.total_settlement_amount += statement["total_settlement_amount"]
        statement_date = statement["statement_date"]
        if statement_date:
            if summary.date_start is None or statement_date < summary.date_start:
                summary.date_start = statement_date
            if summary.date_end is None or statement_date > summary.date_end:
                summary.date_end = statement_date

    summary.valid_records = len(statements)
    return statements, summary
