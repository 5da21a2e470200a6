from .base import TimestampMixin, UUIDMixin, UserScopedMixin
from .order import RawOrder, TikTokOrder
from .settings import ShopeeSettings, TikTokSettings
from .tiktok import TikTokSettlement, TikTokStatement
from .fixed_cost import FixedCost, FixedCostsSettings
from .cash_flow import CashFlowCategory, CashFlowEntry

__all__ = [
    # Base
    "TimestampMixin", "UUIDMixin", "UserScopedMixin",
    # Orders
    "RawOrder", "TikTokOrder",
    # Fee profiles
    "ShopeeSettings", "TikTokSettings",
    # Settlements
    "TikTokSettlement", "TikTokStatement",
    # Fixed costs
    "FixedCost", "FixedCostsSettings",
    # Cash flow
    "CashFlowCategory", "CashFlowEntry",
]
