"""
Marketplace fee profiles (Shopee and TikTok)
"""
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sellerfin.models import ShopeeSettings, TikTokSettings

logger = logging.getLogger(__name__)

SETTINGS_MODELS = {
    "shopee": ShopeeSettings,
    "tiktok": TikTokSettings,
}


def settings_model(marketplace: str):
    try:
        return SETTINGS_MODELS[marketplace]
    except KeyError:
        raise ValueError(f"Unknown marketplace: {marketplace}")


class SettingsService:
    """CRUD over fee profiles; at most one default per user and marketplace"""

    @staticmethod
    def list_settings(db: Session, user_id: UUID, marketplace: str = "shopee") -> List[Any]:
        model = settings_model(marketplace)
        return db.query(model).filter(model.user_id == user_id).order_by(
            model.is_default.desc(), model.created_at.asc()
        ).all()

    @staticmethod
    def get_settings(db: Session, user_id: UUID, settings_id: UUID, marketplace: str = "shopee") -> Optional[Any]:
        model = settings_model(marketplace)
        return db.query(model).filter(model.id == settings_id, model.user_id == user_id).first()

    @staticmethod
    def get_selected(db: Session, user_id: UUID, settings_id: Optional[UUID] = None, marketplace: str = "shopee") -> Optional[Any]:
        """Explicit profile, else the default, else the oldest one"""
        if settings_id:
            return SettingsService.get_settings(db, user_id, settings_id, marketplace)
        profiles = SettingsService.list_settings(db, user_id, marketplace)
        return profiles[0] if profiles else None

    @staticmethod
    def _clear_default(db: Session, user_id: UUID, model, keep_id: Optional[UUID] = None):
        query = db.query(model).filter(model.user_id == user_id, model.is_default == True)
        if keep_id:
            query = query.filter(model.id != keep_id)
        query.update({model.is_default: False}, synchronize_session=False)
        db.flush()

    @staticmethod
    def create_settings(db: Session, user_id: UUID, data: Dict[str, Any], marketplace: str = "shopee") -> Any:
        model = settings_model(marketplace)
        data = dict(data)
        # The first profile becomes the default
        has_any = db.query(model.id).filter(model.user_id == user_id).first() is not None
        if not has_any:
            data["is_default"] = True

        try:
            if data.get("is_default"):
                SettingsService._clear_default(db, user_id, model)
            profile = model(user_id=user_id, **data)
            db.add(profile)
            db.commit()
            db.refresh(profile)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create {marketplace} settings: {e}")
            raise

        logger.info(f"Created {marketplace} settings '{profile.name}' for {user_id}")
        return profile

    @staticmethod
    def update_settings(db: Session, user_id: UUID, settings_id: UUID, data: Dict[str, Any], marketplace: str = "shopee") -> Optional[Any]:
        model = settings_model(marketplace)
        profile = SettingsService.get_settings(db, user_id, settings_id, marketplace)
        if not profile:
            return None

        try:
            if data.get("is_default"):
                SettingsService._clear_default(db, user_id, model, keep_id=profile.id)
            for key, value in data.items():
                setattr(profile, key, value)
            db.commit()
            db.refresh(profile)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to update {marketplace} settings {settings_id}: {e}")
            raise
        return profile

    @staticmethod
    def set_default(db: Session, user_id: UUID, settings_id: UUID, marketplace: str = "shopee") -> Optional[Any]:
        return SettingsService.update_settings(db, user_id, settings_id, {"is_default": True}, marketplace)

    @staticmethod
    def delete_settings(db: Session, user_id: UUID, settings_id: UUID, marketplace: str = "shopee") -> bool:
        profile = SettingsService.get_settings(db, user_id, settings_id, marketplace)
        if not profile:
            return False
        try:
            db.delete(profile)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to delete {marketplace} settings {settings_id}: {e}")
            raise
        return True
