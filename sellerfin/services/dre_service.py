"""
DRE loading: every source is fetched in full and filtered by period in memory.
"""
import logging
from uuid import UUID

from sqlalchemy.orm import Session

from .dre import DREData, calculate_dre
from .fixed_cost_service import FixedCostService
from .periods import DREPeriod
from .results_service import ResultsService
from .settings_service import SettingsService

logger = logging.getLogger(__name__)


class DREService:

    @staticmethod
    def get_dre(db: Session, user_id: UUID, period: DREPeriod) -> DREData:
        dre = calculate_dre(
            ResultsService.fetch_shopee_orders(db, user_id),
            ResultsService.fetch_tiktok_orders(db, user_id),
            ResultsService.fetch_tiktok_settlements(db, user_id),
            FixedCostService.list_costs(db, user_id),
            SettingsService.get_selected(db, user_id, marketplace="shopee"),
            SettingsService.get_selected(db, user_id, marketplace="tiktok"),
            period,
        )
        logger.info(
            f"DRE {period.label} ({period.start} - {period.end}) for {user_id}: "
            f"revenue {dre.receita_bruta_total:.2f}, net {dre.lucro_liquido:.2f}, {len(dre.alertas)} alerts"
        )
        return dre
