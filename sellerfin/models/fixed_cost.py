"""
Fixed Cost Models
"""
from sqlalchemy import Column, String, Numeric, Boolean, Integer, Text
from sellerfin.core import Base
from .base import UUIDMixin, TimestampMixin, UserScopedMixin

class FixedCost(Base, UUIDMixin, TimestampMixin, UserScopedMixin):
    """Operating expense, monthly when recurring"""
    __tablename__ = "fixed_costs"

    category = Column(String(100), nullable=False)
    name = Column(String(200), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False, default=0)
    is_recurring = Column(Boolean, default=True, nullable=False)
    notes = Column(Text)

class FixedCostsSettings(Base, UUIDMixin, TimestampMixin, UserScopedMixin):
    """Monthly volume estimates used to spread fixed costs (one row per user)"""
    __tablename__ = "fixed_costs_settings"

    monthly_orders = Column(Integer, nullable=False, default=100)
    monthly_products_sold = Column(Integer, nullable=False, default=100)
    monthly_revenue = Column(Numeric(14, 2), nullable=False, default=0)
