"""
Import Schemas
"""
from pydantic import BaseModel
from typing import Optional, List, Dict, Any
from datetime import datetime

from .costs import MissingCostResponse


class ShopeeImportOptions(BaseModel):
    """Sent as a JSON form field next to the uploaded file"""
    mapping: Dict[str, Optional[str]]
    costs: Dict[str, float] = {}
    replace_existing: bool = True


class FileAnalysisResponse(BaseModel):
    filename: str
    sheet_name: Optional[str] = None
    headers: List[str]
    total_rows: int
    suggested_mapping: Dict[str, Optional[str]]
    sample_rows: List[Dict[str, Any]] = []


class ImportPreviewResponse(BaseModel):
    total_rows: int
    missing_costs: List[MissingCostResponse] = []
    rows: List[Dict[str, Any]] = []


class ImportStatsResponse(BaseModel):
    total: int
    imported: int
    errors: int

    class Config:
        from_attributes = True


class SettlementSummaryResponse(BaseModel):
    total_rows: int
    valid_records: int
    rejected_records: int
    rejection_reasons: Dict[str, int] = {}
    found_columns: List[str] = []
    missing_columns: List[str] = []

    class Config:
        from_attributes = True


class StatementsSummaryResponse(BaseModel):
    total_rows: int
    valid_records: int
    total_settlement_amount: float
    date_start: Optional[datetime] = None
    date_end: Optional[datetime] = None

    class Config:
        from_attributes = True


class SettlementImportResponse(BaseModel):
    settlements: ImportStatsResponse
    statements: ImportStatsResponse
    settlement_summary: SettlementSummaryResponse
    statements_summary: Optional[StatementsSummaryResponse] = None
