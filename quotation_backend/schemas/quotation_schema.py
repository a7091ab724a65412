# quotation_backend/schemas/quotation_schema.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from quotation_backend.core.enums import QuotationStatus


# --------------------------
# Quotation Item Schemas
# --------------------------
class QuotationItemCreate(BaseModel):
    id: Optional[int] = None                         # set when updating an existing line
    product_id: int
    quantity: int = Field(..., gt=0)
    unit_price: Optional[Decimal] = Field(None, ge=0)  # defaults to the catalog price
    discount_percentage: Decimal = Field(Decimal("0"), ge=0, le=100)
    discount_amount: Decimal = Field(Decimal("0"), ge=0)
    sort_order: Optional[int] = None


class QuotationItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    product_sku: Optional[str] = None
    product_description: Optional[str] = None
    quantity: int
    unit_price: float
    discount_percentage: float
    discount_amount: float
    line_total: float
    sort_order: int

    class Config:
        from_attributes = True


class QuotationStatusHistoryOut(BaseModel):
    id: int
    old_status: Optional[str] = None
    new_status: str
    changed_by: Optional[int] = None
    reason: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# --------------------------
# Quotation Schemas
# --------------------------
class QuotationCreate(BaseModel):
    customer_name: str = Field(..., min_length=1)
    customer_email: str = Field(..., min_length=3)
    customer_phone: Optional[str] = None
    customer_company: Optional[str] = None
    customer_address: Optional[str] = None
    valid_until: Optional[datetime] = None           # defaults to QUOTATION_VALIDITY_DAYS from now
    items: List[QuotationItemCreate] = []
    discount_percentage: Decimal = Field(Decimal("0"), ge=0, le=100)
    discount_amount: Decimal = Field(Decimal("0"), ge=0)
    tax_percentage: Decimal = Field(Decimal("0"), ge=0, le=100)
    shipping_amount: Decimal = Field(Decimal("0"), ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    notes: Optional[str] = None
    internal_notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None


class QuotationUpdate(BaseModel):
    customer_name: Optional[str] = Field(None, min_length=1)
    customer_email: Optional[str] = Field(None, min_length=3)
    customer_phone: Optional[str] = None
    customer_company: Optional[str] = None
    customer_address: Optional[str] = None
    valid_until: Optional[datetime] = None
    items: Optional[List[QuotationItemCreate]] = None
    discount_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    discount_amount: Optional[Decimal] = Field(None, ge=0)
    tax_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    shipping_amount: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    notes: Optional[str] = None
    internal_notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None


class QuotationStatusChange(BaseModel):
    status: QuotationStatus
    reason: Optional[str] = None
    notes: Optional[str] = None


class QuotationApproveRequest(BaseModel):
    reason: Optional[str] = None
    notes: Optional[str] = None


class QuotationRejectRequest(BaseModel):
    reason: str = Field(..., min_length=1)
    notes: Optional[str] = None


class QuotationConvertRequest(BaseModel):
    customer_notes: Optional[str] = None


class QuotationOut(BaseModel):
    id: int
    quotation_number: str
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    customer_company: Optional[str] = None
    customer_address: Optional[str] = None
    status: str
    effective_status: Optional[str] = None
    valid_until: datetime
    subtotal: float
    discount_percentage: float
    discount_amount: float                           # fixed-amount input
    discount_total: float = 0                        # discount actually applied
    tax_percentage: float
    tax_amount: float
    shipping_amount: float
    total_amount: float
    currency: str
    notes: Optional[str] = None
    internal_notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    created_by: Optional[int] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    converted_order_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    items: List[QuotationItemOut] = []
    item_count: int = 0
    allowed_actions: List[str] = []
    status_history: Optional[List[QuotationStatusHistoryOut]] = None

    class Config:
        from_attributes = True


# --------------------------
# Live totals preview
# --------------------------
class QuotationPreviewItem(BaseModel):
    quantity: float = 0
    unit_price: float = 0
    discount_percentage: Optional[float] = 0
    discount_amount: Optional[float] = 0


class QuotationPreviewRequest(BaseModel):
    items: List[QuotationPreviewItem] = []
    discount_percentage: Optional[float] = 0
    discount_amount: Optional[float] = 0
    tax_percentage: Optional[float] = 0
    shipping_amount: Optional[float] = 0


class QuotationTotalsOut(BaseModel):
    subtotal: float
    discount_amount: float
    tax_amount: float
    shipping_amount: float
    total_amount: float
    line_totals: List[float] = []


# --------------------------
# Other payloads
# --------------------------
class QuotationActionsOut(BaseModel):
    status: str
    effective_status: str
    actions: List[str]


class SalesOrderOut(BaseModel):
    id: int
    quotation_id: int
    customer_name: str
    customer_email: str
    total_amount: float
    currency: str
    customer_notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class QuotationConversionOut(BaseModel):
    quotation: QuotationOut
    order: SalesOrderOut


class QuotationSummaryOut(BaseModel):
    total_quotations: int
    total_value: float
    average_quotation_value: float
    quotations_by_status: dict
    conversion_rate: float
    recent_quotations: List[QuotationOut] = []


class MarkExpiredOut(BaseModel):
    expired_count: int


# --------------------------
# Response Schemas
# --------------------------
class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_next: bool
    has_prev: bool


class QuotationResponse(BaseModel):
    message: str
    data: Optional[QuotationOut] = None


class QuotationListResponse(BaseModel):
    message: str
    data: List[QuotationOut] = []
    pagination: Optional[Pagination] = None
