# quotation_backend/models/product_models.py
from sqlalchemy import (
    Column, Integer, String, Boolean, CheckConstraint, DateTime, Numeric, func
)
from quotation_backend.core.db import Base


class Product(Base):
    """Catalog entry. Quotation items copy its name/sku/description when added."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), index=True, nullable=False)
    sku = Column(String(100), unique=True, nullable=True)
    description = Column(String, nullable=True)
    price = Column(Numeric(12, 2), default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(price >= 0, name="check_product_price_non_negative"),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}')>"
