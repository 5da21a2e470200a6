"""
Fee Profile API - Shopee and TikTok settings per user
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from sellerfin.core import get_db, get_current_user_id
from sellerfin.services import SettingsService
from sellerfin.schemas import (
    ShopeeSettingsCreate, ShopeeSettingsUpdate, ShopeeSettingsResponse,
    TikTokSettingsCreate, TikTokSettingsUpdate, TikTokSettingsResponse,
)


settings_router = APIRouter(prefix="/settings", tags=["Settings"])


def _not_found():
    return HTTPException(status_code=404, detail="Configuração não encontrada")


# ===================== SHOPEE =====================

@settings_router.get("/shopee", response_model=List[ShopeeSettingsResponse])
def list_shopee_settings(db: Session = Depends(get_db), user_id: UUID = Depends(get_current_user_id)):
    return SettingsService.list_settings(db, user_id, "shopee")


@settings_router.post("/shopee", response_model=ShopeeSettingsResponse, status_code=201)
def create_shopee_settings(
    data: ShopeeSettingsCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    return SettingsService.create_settings(db, user_id, data.model_dump(exclude_none=True), "shopee")


@settings_router.put("/shopee/{settings_id}", response_model=ShopeeSettingsResponse)
def update_shopee_settings(
    settings_id: UUID,
    data: ShopeeSettingsUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    profile = SettingsService.update_settings(db, user_id, settings_id, data.model_dump(exclude_unset=True, exclude_none=True), "shopee")
    if not profile:
        raise _not_found()
    return profile


@settings_router.post("/shopee/{settings_id}/default", response_model=ShopeeSettingsResponse)
def set_default_shopee_settings(settings_id: UUID, db: Session = Depends(get_db), user_id: UUID = Depends(get_current_user_id)):
    profile = SettingsService.set_default(db, user_id, settings_id, "shopee")
    if not profile:
        raise _not_found()
    return profile


@settings_router.delete("/shopee/{settings_id}")
def delete_shopee_settings(settings_id: UUID, db: Session = Depends(get_db), user_id: UUID = Depends(get_current_user_id)):
    if not SettingsService.delete_settings(db, user_id, settings_id, "shopee"):
        raise _not_found()
    return {"success": True}


# ===================== TIKTOK =====================

@settings_router.get("/tiktok", response_model=List[TikTokSettingsResponse])
def list_tiktok_settings(db: Session = Depends(get_db), user_id: UUID = Depends(get_current_user_id)):
    return SettingsService.list_settings(db, user_id, "tiktok")


@settings_router.post("/tiktok", response_model=TikTokSettingsResponse, status_code=201)
def create_tiktok_settings(
    data: TikTokSettingsCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    return SettingsService.create_settings(db, user_id, data.model_dump(exclude_none=True), "tiktok")


@settings_router.put("/tiktok/{settings_id}", response_model=TikTokSettingsResponse)
def update_tiktok_settings(
    settings_id: UUID,
    data: TikTokSettingsUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    profile = SettingsService.update_settings(db, user_id, settings_id, data.model_dump(exclude_unset=True, exclude_none=True), "tiktok")
    if not profile:
        raise _not_found()
    return profile


@settings_router.post("/tiktok/{settings_id}/default", response_model=TikTokSettingsResponse)
def set_default_tiktok_settings(settings_id: UUID, db: Session = Depends(get_db), user_id: UUID = Depends(get_current_user_id)):
    profile = SettingsService.set_default(db, user_id, settings_id, "tiktok")
    if not profile:
        raise _not_found()
    return profile


@settings_router.delete("/tiktok/{settings_id}")
def delete_tiktok_settings(settings_id: UUID, db: Session = Depends(get_db), user_id: UUID = Depends(get_current_user_id)):
    if not SettingsService.delete_settings(db, user_id, settings_id, "tiktok"):
        raise _not_found()
    return {"success": True}
