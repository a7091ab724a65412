# quotation_backend/models/quotation_models.py
from decimal import Decimal

from sqlalchemy import (
    Column, Integer, String, ForeignKey, DateTime, Numeric, func
)
from sqlalchemy.orm import relationship

from quotation_backend.core.db import Base
from quotation_backend.core.enums import QuotationStatus
from quotation_backend.services.pricing_service import calculate_line_total, calculate_quotation_totals


# ==================================================
# QUOTATION MODEL
# ==================================================
class Quotation(Base):
    __tablename__ = "quotations"
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, index=True)
    quotation_number = Column(String, unique=True, nullable=False, index=True)

    # Customer contact (free text, not linked to a customer record)
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False, index=True)
    customer_phone = Column(String, nullable=True)
    customer_company = Column(String, nullable=True)
    customer_address = Column(String, nullable=True)

    status = Column(String(20), nullable=False, default=QuotationStatus.DRAFT.value, index=True)
    valid_until = Column(DateTime(timezone=True), nullable=False)

    # Financial fields
    subtotal = Column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    discount_percentage = Column(Numeric(5, 2), default=Decimal("0.00"), nullable=False)
    discount_amount = Column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    discount_total = Column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)  # computed
    tax_percentage = Column(Numeric(5, 2), default=Decimal("0.00"), nullable=False)
    tax_amount = Column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    shipping_amount = Column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    total_amount = Column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")

    notes = Column(String, nullable=True)
    internal_notes = Column(String, nullable=True)
    terms_and_conditions = Column(String, nullable=True)

    # Audit fields
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    converted_order_id = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    items = relationship(
        "QuotationItem",
        back_populates="quotation",
        cascade="all, delete-orphan",
        order_by="QuotationItem.sort_order",
        lazy="selectin",
    )
    status_history = relationship(
        "QuotationStatusHistory",
        back_populates="quotation",
        cascade="all, delete-orphan",
        order_by="QuotationStatusHistory.id",
        lazy="selectin",
    )

    # ----------------------
    # Total calculation
    # ----------------------
    def calculate_totals(self):
        """Refresh every line total and the document totals from the current inputs."""
        for item in self.items:
            item.refresh_line_total()

        totals = calculate_quotation_totals(
            self.items,
            discount_percentage=self.discount_percentage,
            discount_amount=self.discount_amount,
            tax_percentage=self.tax_percentage,
            shipping_amount=self.shipping_amount,
        )
        self.subtotal = totals.subtotal
        self.discount_total = totals.discount_amount
        self.tax_amount = totals.tax_amount
        self.shipping_amount = totals.shipping_amount
        self.total_amount = totals.total_amount
        return totals

    def __repr__(self):
        return f"<Quotation(id={self.id}, number='{self.quotation_number}', status='{self.status}')>"


# ==================================================
# QUOTATION ITEM MODEL
# ==================================================
class QuotationItem(Base):
    __tablename__ = "quotation_items"
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, index=True)
    quotation_id = Column(Integer, ForeignKey("quotations.id", ondelete="CASCADE"), nullable=False)

    # Product snapshot taken when the item is added
    product_id = Column(Integer, nullable=False)
    product_name = Column(String, nullable=False)
    product_sku = Column(String, nullable=True)
    product_description = Column(String, nullable=True)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    discount_percentage = Column(Numeric(5, 2), default=Decimal("0.00"), nullable=False)
    discount_amount = Column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    line_total = Column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    quotation = relationship("Quotation", back_populates="items")

    def refresh_line_total(self):
        self.line_total = calculate_line_total(
            self.quantity,
            self.unit_price,
            self.discount_percentage,
            self.discount_amount,
        )
        return self.line_total


# ==================================================
# STATUS HISTORY MODEL
# ==================================================
class QuotationStatusHistory(Base):
    __tablename__ = "quotation_status_history"
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, index=True)
    quotation_id = Column(Integer, ForeignKey("quotations.id", ondelete="CASCADE"), nullable=False)
    old_status = Column(String(20), nullable=True)
    new_status = Column(String(20), nullable=False)
    changed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reason = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    quotation = relationship("Quotation", back_populates="status_history")
