"""
Cash Flow Models
"""
from sqlalchemy import Column, String, Numeric, Boolean, Date, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
from sellerfin.core import Base
from .base import UUIDMixin, TimestampMixin, UserScopedMixin

class CashFlowCategory(Base, UUIDMixin, TimestampMixin, UserScopedMixin):
    """Income / expense category"""
    __tablename__ = "cash_flow_categories"

    name = Column(String(100), nullable=False)
    type = Column(String(10), nullable=False)  # income, expense
    color = Column(String(10), default="#6B7280")
    icon = Column(String(50), default="circle")
    is_default = Column(Boolean, default=False, nullable=False)

    entries = relationship("CashFlowEntry", back_populates="category")

class CashFlowEntry(Base, UUIDMixin, TimestampMixin, UserScopedMixin):
    """Cash flow entry"""
    __tablename__ = "cash_flow_entries"

    category_id = Column(Uuid(as_uuid=True), ForeignKey("cash_flow_categories.id", ondelete="SET NULL"))
    description = Column(String(255), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    type = Column(String(10), nullable=False)  # income, expense
    date = Column(Date, nullable=False, index=True)
    status = Column(String(10), nullable=False, default="pending")  # pending, paid, received
    due_date = Column(Date)

    is_recurring = Column(Boolean, default=False, nullable=False)
    recurrence_type = Column(String(10))  # weekly, monthly, yearly
    recurrence_end_date = Column(Date)
    parent_entry_id = Column(Uuid(as_uuid=True), ForeignKey("cash_flow_entries.id"))
    notes = Column(Text)

    category = relationship("CashFlowCategory", back_populates="entries")
