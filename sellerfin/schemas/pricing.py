"""
Pricing Calculator Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict


class PricingRequest(BaseModel):
    """Percentages are 0-100. Recurring fixed costs default to the user's registered total."""
    custo_produto: float = Field(0, ge=0)
    embalagem: float = Field(0, ge=0)
    preco_cheio: float = Field(0, ge=0)
    desconto: float = Field(0, ge=0, le=100)
    comissao_plataforma: float = Field(20, ge=0, le=100)
    taxa_fixa: float = Field(4, ge=0)
    aliquota_imposto: float = Field(6, ge=0, le=100)
    comissao_afiliados: float = Field(0, ge=0, le=100)
    margem_desejada: float = Field(30, ge=0, le=100)
    papel_produto: str = "novo"
    absorcao_manual: Optional[float] = Field(None, ge=0, le=100)
    volume_esperado_produto: float = Field(50, ge=0)
    volume_mensal: float = Field(100, ge=0)
    custos_fixos_recorrentes: Optional[float] = Field(None, ge=0)


class PricingAlertResponse(BaseModel):
    tipo: str
    mensagem: str

    class Config:
        from_attributes = True


class PricingResponse(BaseModel):
    percentual_absorcao: float
    preco_promocional: float
    custos_variaveis: Dict[str, float]
    total_custos_variaveis: float
    margem_contribuicao: float
    margem_contribuicao_percent: float
    produto_viavel: bool
    custo_fixo_alocado: float
    custo_fixo_por_item: float
    lucro_liquido: float
    margem_real_absorcao: float
    custo_fixo_100_percent: float
    preco_necessario_100_percent: float
    custo_fixo_diluido: float
    custo_total: float
    valor_liquido_recebido: float
    lucro: float
    margem_real: float
    viavel: bool
    margem_atingida: bool
    preco_ideal: float
    margem_inviavel: bool
    alertas: List[PricingAlertResponse] = []

    class Config:
        from_attributes = True
