"""
Imported Order Line Models
"""
from sqlalchemy import Column, String, Numeric, Integer, DateTime, Index
from sqlalchemy.sql import func
from sellerfin.core import Base
from .base import UUIDMixin, TimestampMixin, UserScopedMixin

class RawOrder(Base, UUIDMixin, TimestampMixin, UserScopedMixin):
    """Shopee sold line item (one row per order/product/variation)"""
    __tablename__ = "raw_orders"

    order_id = Column(String(100), nullable=False)
    sku = Column(String(100))  # Empty, blank or "-" means no SKU
    nome_produto = Column(String(500), nullable=False)
    variacao = Column(String(255))

    quantidade = Column(Integer, default=1, nullable=False)
    total_faturado = Column(Numeric(12, 2), default=0)  # Gross revenue
    rebate_shopee = Column(Numeric(12, 2), default=0)  # Platform-funded discount
    custo_unitario = Column(Numeric(12, 4), default=0)

    data_pedido = Column(DateTime(timezone=True), index=True)
    imported_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_raw_orders_user_sku", "user_id", "sku"),
        Index("ix_raw_orders_user_nome", "user_id", "nome_produto"),
    )

class TikTokOrder(Base, UUIDMixin, TimestampMixin, UserScopedMixin):
    """TikTok Shop sold line item"""
    __tablename__ = "tiktok_orders"

    order_id = Column(String(100), nullable=False, index=True)
    sku = Column(String(100))
    nome_produto = Column(String(500))
    variacao = Column(String(255))

    quantidade = Column(Integer, default=1, nullable=False)
    total_faturado = Column(Numeric(12, 2), default=0)  # SKU subtotal after discount
    desconto_plataforma = Column(Numeric(12, 2), default=0)
    desconto_vendedor = Column(Numeric(12, 2), default=0)
    custo_unitario = Column(Numeric(12, 4), default=0)

    data_pedido = Column(DateTime(timezone=True), index=True)
    status_pedido = Column(String(50))

    __table_args__ = (
        Index("ix_tiktok_orders_user_sku", "user_id", "sku"),
    )
