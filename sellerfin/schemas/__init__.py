# Pydantic Schemas Package
from .settings import (
    ShopeeSettingsCreate, ShopeeSettingsUpdate, ShopeeSettingsResponse,
    TikTokSettingsCreate, TikTokSettingsUpdate, TikTokSettingsResponse,
)
from .costs import CostUpdateRequest, BatchCostRequest, CostUpdateResponse, BatchCostResponse, MissingCostResponse
from .imports import ShopeeImportOptions, FileAnalysisResponse, ImportPreviewResponse, ImportStatsResponse, SettlementImportResponse
from .fixed_cost import (
    FixedCostCreate, FixedCostUpdate, FixedCostResponse,
    FixedCostsSettingsUpdate, FixedCostsSettingsResponse, FixedCostMetricsResponse,
)
from .cash_flow import (
    CategoryCreate, CategoryUpdate, CategoryResponse,
    EntryCreate, EntryUpdate, EntryStatusUpdate, EntryResponse, CashFlowSummaryResponse,
)
from .pricing import PricingRequest, PricingResponse

__all__ = [
    "ShopeeSettingsCreate", "ShopeeSettingsUpdate", "ShopeeSettingsResponse",
    "TikTokSettingsCreate", "TikTokSettingsUpdate", "TikTokSettingsResponse",
    "CostUpdateRequest", "BatchCostRequest", "CostUpdateResponse", "BatchCostResponse", "MissingCostResponse",
    "ShopeeImportOptions", "FileAnalysisResponse", "ImportPreviewResponse", "ImportStatsResponse", "SettlementImportResponse",
    "FixedCostCreate", "FixedCostUpdate", "FixedCostResponse",
    "FixedCostsSettingsUpdate", "FixedCostsSettingsResponse", "FixedCostMetricsResponse",
    "CategoryCreate", "CategoryUpdate", "CategoryResponse",
    "EntryCreate", "EntryUpdate", "EntryStatusUpdate", "EntryResponse", "CashFlowSummaryResponse",
    "PricingRequest", "PricingResponse",
]
