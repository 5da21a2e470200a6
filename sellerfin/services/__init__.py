# Services Package
from .results_service import ResultsService
from .cost_service import CostService
from .dre_service import DREService
from .import_service import ImportService
from .settings_service import SettingsService
from .fixed_cost_service import FixedCostService
from .cash_flow_service import CashFlowService
from . import calculations
from . import numeric_validation
from . import pricing_service

__all__ = [
    "ResultsService",
    "CostService",
    "DREService",
    "ImportService",
    "SettingsService",
    "FixedCostService",
    "CashFlowService",
    "calculations",
    "numeric_validation",
    "pricing_service",
]
