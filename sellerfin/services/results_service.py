"""
Per-product results: loads every order of the user and the selected fee
profile, then aggregates.
"""
import logging
from typing import Any, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from sellerfin.models import RawOrder, TikTokOrder, TikTokSettlement, TikTokStatement
from .calculations import (
    GROUP_BY_PRODUCT, CalculationResult, TikTokCalculationResult,
    calculate_results, calculate_tiktok_results,
)
from .pagination import fetch_all_rows
from .settings_service import SettingsService
from .tiktok_payments import filter_settlements

logger = logging.getLogger(__name__)


def _ordered(db: Session, model, user_id: UUID, date_column):
    """User rows, newest first, id as tiebreaker for stable paging"""
    return db.query(model).filter(model.user_id == user_id).order_by(date_column.desc(), model.id.asc())


class ResultsService:
    """Full recomputation on every call"""

    @staticmethod
    def fetch_shopee_orders(db: Session, user_id: UUID) -> List[RawOrder]:
        return fetch_all_rows(_ordered(db, RawOrder, user_id, RawOrder.data_pedido))

    @staticmethod
    def fetch_tiktok_orders(db: Session, user_id: UUID) -> List[TikTokOrder]:
        return fetch_all_rows(_ordered(db, TikTokOrder, user_id, TikTokOrder.data_pedido))

    @staticmethod
    def fetch_tiktok_settlements(db: Session, user_id: UUID) -> List[TikTokSettlement]:
        return fetch_all_rows(_ordered(db, TikTokSettlement, user_id, TikTokSettlement.statement_date))

    @staticmethod
    def fetch_tiktok_statements(db: Session, user_id: UUID) -> List[TikTokStatement]:
        return fetch_all_rows(_ordered(db, TikTokStatement, user_id, TikTokStatement.statement_date))

    @staticmethod
    def get_shopee_results(
        db: Session,
        user_id: UUID,
        settings_id: Optional[UUID] = None,
        group_by: str = GROUP_BY_PRODUCT,
    ) -> Tuple[Optional[Any], CalculationResult]:
        """(fee profile used, results); results are empty-rated when the user has no profile"""
        settings = SettingsService.get_selected(db, user_id, settings_id, "shopee")
        orders = ResultsService.fetch_shopee_orders(db, user_id)
        result = calculate_results(orders, settings, group_by)
        logger.info(f"Shopee results for {user_id}: {len(orders)} orders, {len(result.groups)} groups")
        return settings, result

    @staticmethod
    def get_tiktok_results(
        db: Session,
        user_id: UUID,
        settings_id: Optional[UUID] = None,
        group_by: str = GROUP_BY_PRODUCT,
    ) -> Tuple[Optional[Any], TikTokCalculationResult]:
        settings = SettingsService.get_selected(db, user_id, settings_id, "tiktok")
        orders = ResultsService.fetch_tiktok_orders(db, user_id)
        result = calculate_tiktok_results(orders, settings, group_by)
        logger.info(f"TikTok results for {user_id}: {len(orders)} orders, {len(result.groups)} groups")
        return settings, result

    @staticmethod
    def get_tiktok_payments(
        db: Session,
        user_id: UUID,
        type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[TikTokStatement], List[TikTokSettlement]]:
        """(all statements, settlements matching the type and search filters)"""
        statements = ResultsService.fetch_tiktok_statements(db, user_id)
        settlements = filter_settlements(ResultsService.fetch_tiktok_settlements(db, user_id), type, search)
        logger.info(f"TikTok payments for {user_id}: {len(statements)} statements, {len(settlements)} settlements")
        return statements, settlements
