# quotation_backend/models/sales_order_models.py
from decimal import Decimal

from sqlalchemy import (
    Column, Integer, String, ForeignKey, JSON, DateTime, Numeric, func
)
from sqlalchemy.orm import relationship

from quotation_backend.core.db import Base


class SalesOrder(Base):
    """Order produced when an approved quotation is converted."""

    __tablename__ = "sales_orders"
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, index=True)
    quotation_id = Column(Integer, ForeignKey("quotations.id"), nullable=False, unique=True)
    quotation_snapshot = Column(JSON, nullable=True)

    # Snapshot info
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    total_amount = Column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    currency = Column(String(3), nullable=False)
    customer_notes = Column(String, nullable=True)

    # Audit Fields
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    quotation = relationship("Quotation", foreign_keys=[quotation_id], lazy="selectin")

    def __repr__(self):
        return f"<SalesOrder(id={self.id}, quotation_id={self.quotation_id}, customer='{self.customer_name}')>"
