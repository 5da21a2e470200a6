"""
Cash Flow API - categories, entries and period summary
"""
from dataclasses import asdict
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional, List
from uuid import UUID

from sellerfin.core import get_db, get_current_user_id
from sellerfin.services import CashFlowService
from sellerfin.schemas import (
    CategoryCreate, CategoryUpdate, CategoryResponse,
    EntryCreate, EntryUpdate, EntryStatusUpdate, EntryResponse, CashFlowSummaryResponse,
)


cash_flow_router = APIRouter(prefix="/cash-flow", tags=["Cash Flow"])


def _entry_response(entry) -> EntryResponse:
    response = EntryResponse.model_validate(entry)
    response.category_name = entry.category.name if entry.category else None
    return response


# ===================== CATEGORIES =====================

@cash_flow_router.get("/categories", response_model=List[CategoryResponse])
def list_categories(
    type: Optional[str] = Query(None, pattern="^(income|expense)$"),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    return CashFlowService.list_categories(db, user_id, type)


@cash_flow_router.post("/categories/defaults", response_model=List[CategoryResponse])
def initialize_default_categories(db: Session = Depends(get_db), user_id: UUID = Depends(get_current_user_id)):
    return CashFlowService.initialize_default_categories(db, user_id)


@cash_flow_router.post("/categories", response_model=CategoryResponse, status_code=201)
def create_category(data: CategoryCreate, db: Session = Depends(get_db), user_id: UUID = Depends(get_current_user_id)):
    return CashFlowService.create_category(db, user_id, data.model_dump())


@cash_flow_router.put("/categories/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: UUID,
    data: CategoryUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    category = CashFlowService.update_category(db, user_id, category_id, data.model_dump(exclude_unset=True))
    if not category:
        raise HTTPException(status_code=404, detail="Categoria não encontrada")
    return category


@cash_flow_router.delete("/categories/{category_id}")
def delete_category(category_id: UUID, db: Session = Depends(get_db), user_id: UUID = Depends(get_current_user_id)):
    try:
        deleted = CashFlowService.delete_category(db, user_id, category_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Categoria não encontrada")
    return {"success": True}


# ===================== ENTRIES =====================

@cash_flow_router.get("/entries", response_model=List[EntryResponse])
def list_entries(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    category_id: Optional[UUID] = Query(None),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    entries = CashFlowService.list_entries(db, user_id, start_date, end_date, type, status, category_id)
    return [_entry_response(e) for e in entries]


@cash_flow_router.post("/entries", response_model=EntryResponse, status_code=201)
def create_entry(data: EntryCreate, db: Session = Depends(get_db), user_id: UUID = Depends(get_current_user_id)):
    try:
        entry = CashFlowService.create_entry(db, user_id, data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _entry_response(entry)


@cash_flow_router.put("/entries/{entry_id}", response_model=EntryResponse)
def update_entry(
    entry_id: UUID,
    data: EntryUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    try:
        entry = CashFlowService.update_entry(db, user_id, entry_id, data.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not entry:
        raise HTTPException(status_code=404, detail="Lançamento não encontrado")
    return _entry_response(entry)


@cash_flow_router.patch("/entries/{entry_id}/status", response_model=EntryResponse)
def update_entry_status(
    entry_id: UUID,
    data: EntryStatusUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    try:
        entry = CashFlowService.update_status(db, user_id, entry_id, data.status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not entry:
        raise HTTPException(status_code=404, detail="Lançamento não encontrado")
    return _entry_response(entry)


@cash_flow_router.delete("/entries/{entry_id}")
def delete_entry(entry_id: UUID, db: Session = Depends(get_db), user_id: UUID = Depends(get_current_user_id)):
    if not CashFlowService.delete_entry(db, user_id, entry_id):
        raise HTTPException(status_code=404, detail="Lançamento não encontrado")
    return {"success": True}


# ===================== SUMMARY =====================

@cash_flow_router.get("/summary", response_model=CashFlowSummaryResponse)
def get_summary(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    return CashFlowSummaryResponse(**asdict(CashFlowService.get_summary(db, user_id, start_date, end_date)))
