"""
TikTok Shop Settlement Models
"""
from sqlalchemy import Column, String, Numeric, Integer, DateTime, Index
from sellerfin.core import Base
from .base import UUIDMixin, TimestampMixin, UserScopedMixin

class TikTokSettlement(Base, UUIDMixin, TimestampMixin, UserScopedMixin):
    """
    Per-order settlement breakdown (money trail of one order)
    Fees and deductions are usually negative in the source files.
    """
    __tablename__ = "tiktok_settlements"

    # Basic info
    statement_date = Column(DateTime(timezone=True), index=True)
    statement_id = Column(String(100))
    payment_id = Column(String(100))
    status = Column(String(50))
    type = Column(String(50))  # Order, Refund, Adjustment
    currency = Column(String(3), default="BRL")

    # Order info
    order_id = Column(String(100), nullable=False)
    related_order_id = Column(String(100))
    sku_id = Column(String(100))
    quantidade = Column(Integer, default=1)
    nome_produto = Column(String(500))
    variacao = Column(String(255))

    # Dates
    data_criacao_pedido = Column(DateTime(timezone=True))
    data_entrega = Column(DateTime(timezone=True))

    # Delivery info
    delivery_option = Column(String(100))
    collection_method = Column(String(100))
    chargeable_weight = Column(Numeric(12, 3), default=0)

    # Main amounts
    total_settlement_amount = Column(Numeric(12, 2), default=0)
    customer_payment = Column(Numeric(12, 2), default=0)
    customer_refund = Column(Numeric(12, 2), default=0)
    net_sales = Column(Numeric(12, 2), default=0)
    subtotal_before_discounts = Column(Numeric(12, 2), default=0)
    refund_subtotal = Column(Numeric(12, 2), default=0)

    # Seller discounts
    seller_discounts = Column(Numeric(12, 2), default=0)
    seller_cofunded_discount = Column(Numeric(12, 2), default=0)
    seller_cofunded_discount_refund = Column(Numeric(12, 2), default=0)
    refund_seller_discounts = Column(Numeric(12, 2), default=0)

    # Platform discounts
    platform_discounts = Column(Numeric(12, 2), default=0)
    platform_cofunded_discount = Column(Numeric(12, 2), default=0)
    platform_discounts_refund = Column(Numeric(12, 2), default=0)

    # Shipping
    shipping_total = Column(Numeric(12, 2), default=0)
    tiktok_shipping_fee = Column(Numeric(12, 2), default=0)
    customer_shipping_fee = Column(Numeric(12, 2), default=0)
    refunded_shipping = Column(Numeric(12, 2), default=0)
    shipping_incentive = Column(Numeric(12, 2), default=0)
    shipping_incentive_refund = Column(Numeric(12, 2), default=0)
    shipping_subsidy = Column(Numeric(12, 2), default=0)
    actual_return_shipping_fee = Column(Numeric(12, 2), default=0)

    # Fees
    total_fees = Column(Numeric(12, 2), default=0)
    tiktok_commission_fee = Column(Numeric(12, 2), default=0)
    affiliate_commission = Column(Numeric(12, 2), default=0)
    affiliate_partner_commission = Column(Numeric(12, 2), default=0)
    affiliate_shop_ads_commission = Column(Numeric(12, 2), default=0)
    sfp_service_fee = Column(Numeric(12, 2), default=0)
    fee_per_item = Column(Numeric(12, 2), default=0)
    live_specials_fee = Column(Numeric(12, 2), default=0)
    voucher_xtra_fee = Column(Numeric(12, 2), default=0)
    bonus_cashback_fee = Column(Numeric(12, 2), default=0)

    # Taxes
    icms_difal = Column(Numeric(12, 2), default=0)
    icms_penalty = Column(Numeric(12, 2), default=0)

    # Adjustments
    adjustment_amount = Column(Numeric(12, 2), default=0)
    adjustment_reason = Column(String(255))

    __table_args__ = (
        Index("ix_tiktok_settlements_user_order", "user_id", "order_id"),
    )

class TikTokStatement(Base, UUIDMixin, TimestampMixin, UserScopedMixin):
    """Payment batch summary aggregating many settlements"""
    __tablename__ = "tiktok_statements"

    statement_id = Column(String(100), nullable=False, index=True)
    statement_date = Column(DateTime(timezone=True), index=True)
    payment_id = Column(String(100))
    status = Column(String(50))
    currency = Column(String(3), default="BRL")

    total_settlement_amount = Column(Numeric(12, 2), default=0)
    net_sales = Column(Numeric(12, 2), default=0)
    total_fees = Column(Numeric(12, 2), default=0)
    customer_payment = Column(Numeric(12, 2), default=0)
    seller_discounts = Column(Numeric(12, 2), default=0)
    platform_discounts = Column(Numeric(12, 2), default=0)
    shipping_total = Column(Numeric(12, 2), default=0)
    refund_subtotal = Column(Numeric(12, 2), default=0)
    adjustment_amount = Column(Numeric(12, 2), default=0)
