"""
Fee Profile Schemas

Rates come in as percentages ("14", "14,5", 14.5) and are stored as fractions.
"""
from pydantic import BaseModel, field_validator
from typing import Optional, Union
from datetime import datetime
from uuid import UUID

from sellerfin.services.numeric_validation import parse_currency_input, parse_percentage_input

NumberInput = Union[str, float]

RATE_FIELDS = (
    "taxa_comissao_shopee", "taxa_comissao_tiktok", "taxa_afiliado",
    "percentual_nf_entrada", "imposto_nf_saida", "desconto_nf_saida",
    "percentual_valor_antecipado", "taxa_antecipacao",
)
MONEY_FIELDS = ("adicional_por_item", "gasto_shopee_ads", "gasto_tiktok_ads")


def _as_text(value) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


class _FeeProfileInput(BaseModel):
    @field_validator(*RATE_FIELDS, mode="before", check_fields=False)
    @classmethod
    def parse_rate(cls, v):
        if v is None:
            return v
        return parse_percentage_input(_as_text(v))

    @field_validator(*MONEY_FIELDS, mode="before", check_fields=False)
    @classmethod
    def parse_money(cls, v):
        if v is None:
            return v
        return parse_currency_input(_as_text(v))


class ShopeeSettingsCreate(_FeeProfileInput):
    name: str = "Padrão"
    taxa_comissao_shopee: Optional[NumberInput] = 0
    adicional_por_item: Optional[NumberInput] = 0
    percentual_nf_entrada: Optional[NumberInput] = 0
    imposto_nf_saida: Optional[NumberInput] = 0
    desconto_nf_saida: Optional[NumberInput] = 0
    percentual_valor_antecipado: Optional[NumberInput] = 0
    taxa_antecipacao: Optional[NumberInput] = 0
    gasto_shopee_ads: Optional[NumberInput] = 0
    is_default: bool = False


class ShopeeSettingsUpdate(_FeeProfileInput):
    name: Optional[str] = None
    taxa_comissao_shopee: Optional[NumberInput] = None
    adicional_por_item: Optional[NumberInput] = None
    percentual_nf_entrada: Optional[NumberInput] = None
    imposto_nf_saida: Optional[NumberInput] = None
    desconto_nf_saida: Optional[NumberInput] = None
    percentual_valor_antecipado: Optional[NumberInput] = None
    taxa_antecipacao: Optional[NumberInput] = None
    gasto_shopee_ads: Optional[NumberInput] = None
    is_default: Optional[bool] = None


class TikTokSettingsCreate(_FeeProfileInput):
    name: str = "Padrão"
    taxa_comissao_tiktok: Optional[NumberInput] = 0
    taxa_afiliado: Optional[NumberInput] = 0
    adicional_por_item: Optional[NumberInput] = 0
    percentual_nf_entrada: Optional[NumberInput] = 0
    imposto_nf_saida: Optional[NumberInput] = 0
    desconto_nf_saida: Optional[NumberInput] = 0
    percentual_valor_antecipado: Optional[NumberInput] = 0
    taxa_antecipacao: Optional[NumberInput] = 0
    gasto_tiktok_ads: Optional[NumberInput] = 0
    is_default: bool = False


class TikTokSettingsUpdate(_FeeProfileInput):
    name: Optional[str] = None
    taxa_comissao_tiktok: Optional[NumberInput] = None
    taxa_afiliado: Optional[NumberInput] = None
    adicional_por_item: Optional[NumberInput] = None
    percentual_nf_entrada: Optional[NumberInput] = None
    imposto_nf_saida: Optional[NumberInput] = None
    desconto_nf_saida: Optional[NumberInput] = None
    percentual_valor_antecipado: Optional[NumberInput] = None
    taxa_antecipacao: Optional[NumberInput] = None
    gasto_tiktok_ads: Optional[NumberInput] = None
    is_default: Optional[bool] = None


class ShopeeSettingsResponse(BaseModel):
    id: UUID
    name: str
    taxa_comissao_shopee: float
    adicional_por_item: float
    percentual_nf_entrada: float
    imposto_nf_saida: float
    desconto_nf_saida: float
    percentual_valor_antecipado: float
    taxa_antecipacao: float
    gasto_shopee_ads: float
    is_default: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TikTokSettingsResponse(BaseModel):
    id: UUID
    name: str
    taxa_comissao_tiktok: float
    taxa_afiliado: float
    adicional_por_item: float
    percentual_nf_entrada: float
    imposto_nf_saida: float
    desconto_nf_saida: float
    percentual_valor_antecipado: float
    taxa_antecipacao: float
    gasto_tiktok_ads: float
    is_default: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
