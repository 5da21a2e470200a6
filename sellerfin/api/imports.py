"""
Import API - Shopee order sheets (mapping wizard), TikTok orders and settlements
"""
import logging
from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form
from pydantic import ValidationError
from sqlalchemy.orm import Session
from uuid import UUID

from sellerfin.core import get_db, get_current_user_id
from sellerfin.services import CostService, ImportService
from sellerfin.services.import_service import ImportSession, ImportStateError, MappingError
from sellerfin.services.tabular import TabularFileError, find_sheet, read_tabular_file, read_workbook
from sellerfin.services.tiktok_import import (
    ORDER_DETAILS_SHEETS, STATEMENTS_SHEETS,
    parse_all_settlements, parse_statements_sheet, parse_tiktok_orders,
)
from sellerfin.schemas import (
    ShopeeImportOptions, FileAnalysisResponse, ImportPreviewResponse, ImportStatsResponse, SettlementImportResponse,
)

logger = logging.getLogger(__name__)

imports_router = APIRouter(prefix="/imports", tags=["Imports"])

SAMPLE_ROWS = 5


async def _read_file(file: UploadFile):
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Arquivo vazio")
    try:
        return read_tabular_file(file.filename, content)
    except TabularFileError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _parse_options(options: str) -> ShopeeImportOptions:
    try:
        return ShopeeImportOptions.model_validate_json(options)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Opções de importação inválidas: {e.error_count()} erro(s)")


def _start_session(db: Session, user_id: UUID, table) -> ImportSession:
    session = ImportSession(CostService.known_costs(db, user_id, "shopee"))
    try:
        session.load(table.headers, table.rows)
    except ImportStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return session


def _apply_options(session: ImportSession, options: ShopeeImportOptions):
    try:
        session.set_mapping(options.mapping)
    except MappingError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return session.provide_costs(options.costs)


# ===================== SHOPEE =====================

@imports_router.post("/shopee/analyze", response_model=FileAnalysisResponse)
async def analyze_shopee_file(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    """Read the sheet and suggest a column mapping"""
    table = await _read_file(file)
    session = _start_session(db, user_id, table)
    return FileAnalysisResponse(
        filename=file.filename,
        sheet_name=table.sheet_name,
        headers=table.headers,
        total_rows=len(table.rows),
        suggested_mapping=session.mapping,
        sample_rows=table.rows[:SAMPLE_ROWS],
    )


@imports_router.post("/shopee/preview", response_model=ImportPreviewResponse)
async def preview_shopee_import(
    file: UploadFile = File(...),
    options: str = Form(...),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    """Mapped rows with costs applied, plus the products still missing a cost"""
    table = await _read_file(file)
    session = _start_session(db, user_id, table)
    missing = _apply_options(session, _parse_options(options))
    if missing:
        return ImportPreviewResponse(
            total_rows=len(session.rows),
            missing_costs=[asdict(m) for m in missing],
        )
    rows = session.preview()
    return ImportPreviewResponse(total_rows=len(rows), rows=rows)


@imports_router.post("/shopee/commit", response_model=ImportStatsResponse)
async def commit_shopee_import(
    file: UploadFile = File(...),
    options: str = Form(...),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    table = await _read_file(file)
    parsed_options = _parse_options(options)
    session = _start_session(db, user_id, table)
    _apply_options(session, parsed_options)
    try:
        rows = session.preview()
    except ImportStateError as e:
        raise HTTPException(status_code=409, detail=str(e))

    stats = ImportService.import_shopee_orders(
        db, user_id, rows,
        replace_existing=parsed_options.replace_existing,
        costs=session.provided_costs,
    )
    session.complete(stats.imported)
    return ImportStatsResponse(**asdict(stats))


# ===================== TIKTOK =====================

@imports_router.post("/tiktok/orders", response_model=ImportStatsResponse)
async def import_tiktok_orders(
    file: UploadFile = File(...),
    replace_existing: bool = Form(True),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    table = await _read_file(file)
    rows = parse_tiktok_orders(table.rows)
    if not rows:
        raise HTTPException(status_code=400, detail="Nenhum pedido válido encontrado no arquivo")
    stats = ImportService.import_tiktok_orders(db, user_id, rows, replace_existing=replace_existing)
    return ImportStatsResponse(**asdict(stats))


@imports_router.post("/tiktok/settlements", response_model=SettlementImportResponse)
async def import_tiktok_settlements(
    file: UploadFile = File(...),
    replace_existing: bool = Form(True),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    """Settlement workbook: order details sheet plus the optional statements sheet"""
    content = await file.read()
    try:
        sheets = read_workbook(content)
    except TabularFileError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not sheets:
        raise HTTPException(status_code=400, detail="Planilha sem abas")

    details = find_sheet(sheets, *ORDER_DETAILS_SHEETS) or next(iter(sheets.values()))
    settlements, settlement_summary = parse_all_settlements(details.rows)

    statements, statements_summary = [], None
    statements_sheet = find_sheet(sheets, *STATEMENTS_SHEETS)
    if statements_sheet is not None:
        statements, statements_summary = parse_statements_sheet(statements_sheet.rows)

    if not settlements and not statements:
        raise HTTPException(status_code=400, detail="Nenhum registro válido encontrado no arquivo")

    result = ImportService.import_tiktok_settlements(
        db, user_id, settlements, statements, replace_existing=replace_existing
    )
    return SettlementImportResponse(
        settlements=asdict(result.settlements),
        statements=asdict(result.statements),
        settlement_summary=asdict(settlement_summary),
        statements_summary=asdict(statements_summary) if statements_summary else None,
    )
