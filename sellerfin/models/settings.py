"""
Marketplace Fee Profiles

Rates are stored as fractions (0.14 = 14%). At most one profile per user and
marketplace is flagged as default.
"""
from sqlalchemy import Column, String, Numeric, Boolean, Index
from sellerfin.core import Base
from .base import UUIDMixin, TimestampMixin, UserScopedMixin

class ShopeeSettings(Base, UUIDMixin, TimestampMixin, UserScopedMixin):
    """Shopee fee profile"""
    __tablename__ = "settings"

    name = Column(String(100), nullable=False, default="Padrão")
    taxa_comissao_shopee = Column(Numeric(8, 6), default=0)
    adicional_por_item = Column(Numeric(12, 2), default=0)  # Fixed fee per item sold
    percentual_nf_entrada = Column(Numeric(8, 6), default=0)  # Inbound invoice on product cost
    imposto_nf_saida = Column(Numeric(8, 6), default=0)  # Outbound tax on revenue
    desconto_nf_saida = Column(Numeric(8, 6), default=0)
    percentual_valor_antecipado = Column(Numeric(8, 6), default=0)  # Share of payouts anticipated
    taxa_antecipacao = Column(Numeric(8, 6), default=0)
    gasto_shopee_ads = Column(Numeric(12, 2), default=0)  # Flat ad spend for the period
    is_default = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index(
            "uq_settings_user_default", "user_id", unique=True,
            sqlite_where=(is_default == True),
            postgresql_where=(is_default == True),
        ),
    )

class TikTokSettings(Base, UUIDMixin, TimestampMixin, UserScopedMixin):
    """TikTok Shop fee profile"""
    __tablename__ = "tiktok_settings"

    name = Column(String(100), nullable=False, default="Padrão")
    taxa_comissao_tiktok = Column(Numeric(8, 6), default=0)
    taxa_afiliado = Column(Numeric(8, 6), default=0)
    adicional_por_item = Column(Numeric(12, 2), default=0)
    percentual_nf_entrada = Column(Numeric(8, 6), default=0)
    imposto_nf_saida = Column(Numeric(8, 6), default=0)
    desconto_nf_saida = Column(Numeric(8, 6), default=0)  # Share of revenue exempt from outbound tax
    percentual_valor_antecipado = Column(Numeric(8, 6), default=0)
    taxa_antecipacao = Column(Numeric(8, 6), default=0)
    gasto_tiktok_ads = Column(Numeric(12, 2), default=0)
    is_default = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index(
            "uq_tiktok_settings_user_default", "user_id", unique=True,
            sqlite_where=(is_default == True),
            postgresql_where=(is_default == True),
        ),
    )
