"""
Fixed (operating) costs and their per-order / per-product share
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sellerfin.models import FixedCost, FixedCostsSettings
from .calculations import percentage, read_field, to_number

logger = logging.getLogger(__name__)

COST_CATEGORIES = [
    {
        "name": "Estrutura Administrativa",
        "examples": ["Pró-labore", "Salários", "Encargos trabalhistas", "Contabilidade", "Serviços administrativos"],
    },
    {
        "name": "Infraestrutura & Operação",
        "examples": ["Aluguel", "Condomínio", "Energia elétrica", "Água", "Internet", "Telefonia", "Limpeza", "Segurança"],
    },
    {
        "name": "Tecnologia & Ferramentas",
        "examples": ["ERP", "Sistema de gestão", "Emissão de NF", "BI/Dashboards", "CRM", "WhatsApp Business API",
                     "Google Workspace", "Notion", "SaaS"],
    },
    {
        "name": "Marketing Fixo",
        "examples": ["Agência", "Designer", "Social Media", "Ferramentas de criação", "Produção de conteúdo"],
    },
    {
        "name": "Financeiro & Bancário",
        "examples": ["Conta PJ", "Tarifas bancárias", "Gateways", "Sistemas financeiros"],
    },
    {
        "name": "Tributação Fixa",
        "examples": ["DAS Simples Nacional", "Licenças e alvarás"],
    },
    {
        "name": "Logística Estrutural",
        "examples": ["Galpão", "Operador logístico", "Software logístico", "Equipamentos (rateio)"],
    },
    {
        "name": "Despesas Recorrentes Diversas",
        "examples": ["Seguros", "Manutenção", "Assinaturas", "Material de escritório"],
    },
]

DEFAULT_MONTHLY_ORDERS = 100
DEFAULT_MONTHLY_PRODUCTS_SOLD = 100


@dataclass
class FixedCostMetrics:
    total_recurring: float = 0
    total: float = 0
    cost_per_order: float = 0
    cost_per_product: float = 0
    cost_percentage: float = 0
    by_category: Dict[str, float] = field(default_factory=dict)


def calculate_fixed_cost_metrics(costs: Iterable[Any], settings: Any) -> FixedCostMetrics:
    """Recurring costs spread over the monthly volume estimates"""
    metrics = FixedCostMetrics()
    for cost in costs:
        amount = to_number(read_field(cost, "amount"))
        category = read_field(cost, "category") or "Outros"
        metrics.total += amount
        metrics.by_category[category] = metrics.by_category.get(category, 0.0) + amount
        if read_field(cost, "is_recurring"):
            metrics.total_recurring += amount

    monthly_orders = to_number(read_field(settings, "monthly_orders"))
    monthly_products = to_number(read_field(settings, "monthly_products_sold"))
    monthly_revenue = to_number(read_field(settings, "monthly_revenue"))

    metrics.cost_per_order = metrics.total_recurring / monthly_orders if monthly_orders > 0 else 0.0
    metrics.cost_per_product = metrics.total_recurring / monthly_products if monthly_products > 0 else 0.0
    metrics.cost_percentage = percentage(metrics.total_recurring, monthly_revenue) if monthly_revenue > 0 else 0.0
    return metrics


class FixedCostService:
    """Fixed cost CRUD and volume settings"""

    @staticmethod
    def list_costs(db: Session, user_id: UUID) -> List[FixedCost]:
        return db.query(FixedCost).filter(FixedCost.user_id == user_id).order_by(
            FixedCost.category.asc(), FixedCost.name.asc()
        ).all()

    @staticmethod
    def get_cost(db: Session, user_id: UUID, cost_id: UUID) -> Optional[FixedCost]:
        return db.query(FixedCost).filter(FixedCost.id == cost_id, FixedCost.user_id == user_id).first()

    @staticmethod
    def create_cost(db: Session, user_id: UUID, data: Dict[str, Any]) -> FixedCost:
        cost = FixedCost(user_id=user_id, **data)
        try:
            db.add(cost)
            db.commit()
            db.refresh(cost)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create fixed cost: {e}")
            raise
        return cost

    @staticmethod
    def update_cost(db: Session, user_id: UUID, cost_id: UUID, data: Dict[str, Any]) -> Optional[FixedCost]:
        cost = FixedCostService.get_cost(db, user_id, cost_id)
        if not cost:
            return None
        try:
            for key, value in data.items():
                setattr(cost, key, value)
            db.commit()
            db.refresh(cost)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to update fixed cost {cost_id}: {e}")
            raise
        return cost

    @staticmethod
    def delete_cost(db: Session, user_id: UUID, cost_id: UUID) -> bool:
        cost = FixedCostService.get_cost(db, user_id, cost_id)
        if not cost:
            return False
        try:
            db.delete(cost)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to delete fixed cost {cost_id}: {e}")
            raise
        return True

    @staticmethod
    def get_or_create_settings(db: Session, user_id: UUID) -> FixedCostsSettings:
        """Volume settings row, created with defaults on first access"""
        settings = db.query(FixedCostsSettings).filter(FixedCostsSettings.user_id == user_id).first()
        if settings:
            return settings

        settings = FixedCostsSettings(
            user_id=user_id,
            monthly_orders=DEFAULT_MONTHLY_ORDERS,
            monthly_products_sold=DEFAULT_MONTHLY_PRODUCTS_SOLD,
            monthly_revenue=0,
        )
        try:
            db.add(settings)
            db.commit()
            db.refresh(settings)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create fixed cost settings for {user_id}: {e}")
            raise
        logger.info(f"Created default fixed cost settings for {user_id}")
        return settings

    @staticmethod
    def update_settings(db: Session, user_id: UUID, data: Dict[str, Any]) -> FixedCostsSettings:
        settings = FixedCostService.get_or_create_settings(db, user_id)
        try:
            for key, value in data.items():
                setattr(settings, key, value)
            db.commit()
            db.refresh(settings)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to update fixed cost settings for {user_id}: {e}")
            raise
        return settings

    @staticmethod
    def get_metrics(db: Session, user_id: UUID) -> FixedCostMetrics:
        costs = FixedCostService.list_costs(db, user_id)
        settings = FixedCostService.get_or_create_settings(db, user_id)
        return calculate_fixed_cost_metrics(costs, settings)

    @staticmethod
    def total_recurring(db: Session, user_id: UUID) -> float:
        return calculate_fixed_cost_metrics(FixedCostService.list_costs(db, user_id), None).total_recurring
