from .config import settings
from .database import engine, SessionLocal, get_db, Base
from .identity import get_current_user_id

__all__ = ["settings", "engine", "SessionLocal", "get_db", "Base", "get_current_user_id"]
