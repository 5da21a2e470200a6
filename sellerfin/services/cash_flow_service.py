"""
Cash flow ledger: categories, entries and period summary
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from sellerfin.models import CashFlowCategory, CashFlowEntry
from .calculations import read_field, to_number

logger = logging.getLogger(__name__)

TYPE_INCOME = "income"
TYPE_EXPENSE = "expense"
ENTRY_TYPES = (TYPE_INCOME, TYPE_EXPENSE)

STATUS_PENDING = "pending"
STATUS_PAID = "paid"
STATUS_RECEIVED = "received"
ENTRY_STATUSES = (STATUS_PENDING, STATUS_PAID, STATUS_RECEIVED)

RECURRENCE_TYPES = ("weekly", "monthly", "yearly")

DEFAULT_CATEGORIES = [
    # Income
    {"name": "Vendas", "type": TYPE_INCOME, "color": "#10B981", "icon": "shopping-cart"},
    {"name": "Serviços", "type": TYPE_INCOME, "color": "#3B82F6", "icon": "briefcase"},
    {"name": "Empréstimos", "type": TYPE_INCOME, "color": "#8B5CF6", "icon": "banknote"},
    {"name": "Outros Recebimentos", "type": TYPE_INCOME, "color": "#6B7280", "icon": "plus-circle"},
    # Expense
    {"name": "Fornecedores", "type": TYPE_EXPENSE, "color": "#EF4444", "icon": "truck"},
    {"name": "Impostos", "type": TYPE_EXPENSE, "color": "#F59E0B", "icon": "file-text"},
    {"name": "Marketing", "type": TYPE_EXPENSE, "color": "#EC4899", "icon": "megaphone"},
    {"name": "Aluguel", "type": TYPE_EXPENSE, "color": "#14B8A6", "icon": "home"},
    {"name": "Salários", "type": TYPE_EXPENSE, "color": "#6366F1", "icon": "users"},
    {"name": "Logística", "type": TYPE_EXPENSE, "color": "#F97316", "icon": "package"},
    {"name": "Outras Despesas", "type": TYPE_EXPENSE, "color": "#6B7280", "icon": "minus-circle"},
]

UNCATEGORIZED = "Sem categoria"


@dataclass
class CategoryTotal:
    category_id: Optional[UUID]
    name: str
    type: str
    total: float = 0


@dataclass
class CashFlowSummary:
    total_income: float = 0
    total_expense: float = 0
    balance: float = 0
    realized_income: float = 0  # received
    realized_expense: float = 0  # paid
    realized_balance: float = 0
    pending_income: float = 0
    pending_expense: float = 0
    by_category: List[CategoryTotal] = field(default_factory=list)


def summarize_entries(entries: Iterable[Any]) -> CashFlowSummary:
    summary = CashFlowSummary()
    categories: Dict[Any, CategoryTotal] = {}

    for entry in entries:
        amount = to_number(read_field(entry, "amount"))
        entry_type = read_field(entry, "type")
        status = read_field(entry, "status")
        income = entry_type == TYPE_INCOME

        if income:
            summary.total_income += amount
            if status == STATUS_RECEIVED:
                summary.realized_income += amount
            elif status == STATUS_PENDING:
                summary.pending_income += amount
        else:
            summary.total_expense += amount
            if status == STATUS_PAID:
                summary.realized_expense += amount
            elif status == STATUS_PENDING:
                summary.pending_expense += amount

        category = read_field(entry, "category")
        category_id = read_field(entry, "category_id")
        key = (category_id, entry_type)
        if key not in categories:
            categories[key] = CategoryTotal(
                category_id=category_id,
                name=read_field(category, "name") or UNCATEGORIZED,
                type=entry_type,
            )
        categories[key].total += amount

    summary.balance = summary.total_income - summary.total_expense
    summary.realized_balance = summary.realized_income - summary.realized_expense
    summary.by_category = sorted(categories.values(), key=lambda c: c.total, reverse=True)
    return summary


class CashFlowService:
    """Cash flow categories and entries of one user"""

    # ===================== CATEGORIES =====================

    @staticmethod
    def list_categories(db: Session, user_id: UUID, type: Optional[str] = None) -> List[CashFlowCategory]:
        query = db.query(CashFlowCategory).filter(CashFlowCategory.user_id == user_id)
        if type:
            query = query.filter(CashFlowCategory.type == type)
        return query.order_by(CashFlowCategory.name.asc()).all()

    @staticmethod
    def initialize_default_categories(db: Session, user_id: UUID) -> List[CashFlowCategory]:
        """Default catalogue, created only when the user has no category yet"""
        existing = CashFlowService.list_categories(db, user_id)
        if existing:
            return existing
        try:
            db.add_all([CashFlowCategory(user_id=user_id, is_default=True, **cat) for cat in DEFAULT_CATEGORIES])
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create default cash flow categories for {user_id}: {e}")
            raise
        logger.info(f"Created {len(DEFAULT_CATEGORIES)} default cash flow categories for {user_id}")
        return CashFlowService.list_categories(db, user_id)

    @staticmethod
    def get_category(db: Session, user_id: UUID, category_id: UUID) -> Optional[CashFlowCategory]:
        return db.query(CashFlowCategory).filter(
            CashFlowCategory.id == category_id,
            CashFlowCategory.user_id == user_id,
        ).first()

    @staticmethod
    def create_category(db: Session, user_id: UUID, data: Dict[str, Any]) -> CashFlowCategory:
        if data.get("type") not in ENTRY_TYPES:
            raise ValueError(f"Tipo inválido: {data.get('type')}")
        category = CashFlowCategory(user_id=user_id, is_default=False, **data)
        try:
            db.add(category)
            db.commit()
            db.refresh(category)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create cash flow category: {e}")
            raise
        return category

    @staticmethod
    def update_category(db: Session, user_id: UUID, category_id: UUID, data: Dict[str, Any]) -> Optional[CashFlowCategory]:
        category = CashFlowService.get_category(db, user_id, category_id)
        if not category:
            return None
        if "type" in data and data["type"] not in ENTRY_TYPES:
            raise ValueError(f"Tipo inválido: {data['type']}")
        try:
            for key, value in data.items():
                setattr(category, key, value)
            db.commit()
            db.refresh(category)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to update cash flow category {category_id}: {e}")
            raise
        return category

    @staticmethod
    def delete_category(db: Session, user_id: UUID, category_id: UUID) -> bool:
        """Custom categories only; entries keep existing without category"""
        category = CashFlowService.get_category(db, user_id, category_id)
        if not category:
            return False
        if category.is_default:
            raise ValueError("Categorias padrão não podem ser excluídas.")
        try:
            db.query(CashFlowEntry).filter(
                CashFlowEntry.user_id == user_id,
                CashFlowEntry.category_id == category_id,
            ).update({CashFlowEntry.category_id: None}, synchronize_session=False)
            db.delete(category)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to delete cash flow category {category_id}: {e}")
            raise
        return True

    # ===================== ENTRIES =====================

    @staticmethod
    def list_entries(
        db: Session,
        user_id: UUID,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        type: Optional[str] = None,
        status: Optional[str] = None,
        category_id: Optional[UUID] = None,
    ) -> List[CashFlowEntry]:
        query = db.query(CashFlowEntry).options(joinedload(CashFlowEntry.category)).filter(
            CashFlowEntry.user_id == user_id
        )
        if start_date:
            query = query.filter(CashFlowEntry.date >= start_date)
        if end_date:
            query = query.filter(CashFlowEntry.date <= end_date)
        if type:
            query = query.filter(CashFlowEntry.type == type)
        if status:
            query = query.filter(CashFlowEntry.status == status)
        if category_id:
            query = query.filter(CashFlowEntry.category_id == category_id)
        return query.order_by(CashFlowEntry.date.desc(), CashFlowEntry.created_at.desc()).all()

    @staticmethod
    def get_entry(db: Session, user_id: UUID, entry_id: UUID) -> Optional[CashFlowEntry]:
        return db.query(CashFlowEntry).filter(
            CashFlowEntry.id == entry_id,
            CashFlowEntry.user_id == user_id,
        ).first()

    @staticmethod
    def _validate_entry(db: Session, user_id: UUID, data: Dict[str, Any]):
        if "type" in data and data["type"] not in ENTRY_TYPES:
            raise ValueError(f"Tipo inválido: {data['type']}")
        if "status" in data and data["status"] not in ENTRY_STATUSES:
            raise ValueError(f"Status inválido: {data['status']}")
        if data.get("recurrence_type") and data["recurrence_type"] not in RECURRENCE_TYPES:
            raise ValueError(f"Recorrência inválida: {data['recurrence_type']}")
        if data.get("category_id") and not CashFlowService.get_category(db, user_id, data["category_id"]):
            raise ValueError("Categoria não encontrada.")

    @staticmethod
    def create_entry(db: Session, user_id: UUID, data: Dict[str, Any]) -> CashFlowEntry:
        CashFlowService._validate_entry(db, user_id, data)
        entry = CashFlowEntry(user_id=user_id, **data)
        try:
            db.add(entry)
            db.commit()
            db.refresh(entry)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create cash flow entry: {e}")
            raise
        return entry

    @staticmethod
    def update_entry(db: Session, user_id: UUID, entry_id: UUID, data: Dict[str, Any]) -> Optional[CashFlowEntry]:
        entry = CashFlowService.get_entry(db, user_id, entry_id)
        if not entry:
            return None
        CashFlowService._validate_entry(db, user_id, data)
        try:
            for key, value in data.items():
                setattr(entry, key, value)
            db.commit()
            db.refresh(entry)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to update cash flow entry {entry_id}: {e}")
            raise
        return entry

    @staticmethod
    def update_status(db: Session, user_id: UUID, entry_id: UUID, status: str) -> Optional[CashFlowEntry]:
        return CashFlowService.update_entry(db, user_id, entry_id, {"status": status})

    @staticmethod
    def delete_entry(db: Session, user_id: UUID, entry_id: UUID) -> bool:
        entry = CashFlowService.get_entry(db, user_id, entry_id)
        if not entry:
            return False
        try:
            db.delete(entry)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to delete cash flow entry {entry_id}: {e}")
            raise
        return True

    @staticmethod
    def get_summary(db: Session, user_id: UUID, start_date: Optional[date] = None, end_date: Optional[date] = None) -> CashFlowSummary:
        return summarize_entries(CashFlowService.list_entries(db, user_id, start_date, end_date))
