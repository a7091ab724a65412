# quotation_backend/services/quotation_service.py
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from io import BytesIO
from typing import List, Optional
from uuid import uuid4

from fastapi import HTTPException
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from quotation_backend.core.config import (
    DEFAULT_CURRENCY,
    QUOTATION_NUMBER_PREFIX,
    QUOTATION_VALIDITY_DAYS,
)
from quotation_backend.core.enums import QuotationAction, QuotationStatus, UserRole
from quotation_backend.models.product_models import Product
from quotation_backend.models.quotation_models import Quotation, QuotationItem, QuotationStatusHistory
from quotation_backend.models.sales_order_models import SalesOrder
from quotation_backend.schemas.quotation_schema import (
    Pagination,
    QuotationConversionOut,
    QuotationCreate,
    QuotationItemCreate,
    QuotationListResponse,
    QuotationOut,
    QuotationPreviewRequest,
    QuotationResponse,
    QuotationStatusChange,
    QuotationSummaryOut,
    QuotationTotalsOut,
    QuotationUpdate,
    SalesOrderOut,
)
from quotation_backend.services.pricing_service import calculate_line_total, calculate_quotation_totals
from quotation_backend.services.quotation_status_service import (
    allowed_actions,
    can_convert,
    can_delete,
    can_edit,
    can_transition,
    effective_status,
    is_expired,
    to_utc,
)
from quotation_backend.utils.activity_helpers import log_user_activity
from quotation_backend.utils.check_roles import has_role
from quotation_backend.utils.formatting import format_currency, format_date, format_status

logger = logging.getLogger(__name__)

ADMIN_ONLY_TARGETS = {
    QuotationStatus.APPROVED,
    QuotationStatus.REJECTED,
    QuotationStatus.CONVERTED,
    QuotationStatus.EXPIRED,
}

SORTABLE_COLUMNS = {
    "created_at": Quotation.created_at,
    "valid_until": Quotation.valid_until,
    "total_amount": Quotation.total_amount,
    "status": Quotation.status,
    "quotation_number": Quotation.quotation_number,
}


# --------------------------
# Helpers
# --------------------------
def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_quotation_out(quotation: Quotation, include_history: bool = False,
                     now: Optional[datetime] = None, user=None) -> QuotationOut:
    out = QuotationOut.model_validate(quotation)
    out.effective_status = effective_status(quotation, now).value
    out.allowed_actions = [action.value for action in allowed_actions(quotation, now, user=user)]
    out.item_count = len(quotation.items)
    if not include_history:
        out.status_history = None
    return out


async def _load_quotation(db: AsyncSession, quotation_id: int) -> Quotation:
    result = await db.execute(
        select(Quotation)
        .options(selectinload(Quotation.items), selectinload(Quotation.status_history))
        .where(Quotation.id == quotation_id)
        .execution_options(populate_existing=True)
    )
    quotation = result.scalars().first()
    if not quotation:
        raise HTTPException(status_code=404, detail="Quotation not found")
    return quotation


async def _snapshot_item(db: AsyncSession, item_data: QuotationItemCreate, position: int) -> QuotationItem:
    product = await db.get(Product, item_data.product_id)
    if not product or not product.is_active:
        raise HTTPException(status_code=404, detail=f"Product {item_data.product_id} not found")

    item = QuotationItem(
        product_id=product.id,
        product_name=product.name,
        product_sku=product.sku,
        product_description=product.description,
        quantity=item_data.quantity,
        unit_price=item_data.unit_price if item_data.unit_price is not None else product.price,
        discount_percentage=item_data.discount_percentage,
        discount_amount=item_data.discount_amount,
        sort_order=item_data.sort_order if item_data.sort_order is not None else position,
    )
    item.refresh_line_total()
    return item


def _record_status(quotation: Quotation, old_status: Optional[str], new_status: QuotationStatus,
                   user_id: Optional[int], reason: Optional[str] = None, notes: Optional[str] = None):
    quotation.status_history.append(QuotationStatusHistory(
        old_status=old_status,
        new_status=new_status.value,
        changed_by=user_id,
        reason=reason,
        notes=notes,
    ))


def _ensure_editable(quotation: Quotation):
    if not can_edit(quotation):
        raise HTTPException(
            status_code=400,
            detail=f"Quotation is {quotation.status}; only draft quotations can be edited",
        )


# --------------------------
# LIVE TOTALS PREVIEW
# --------------------------
def preview_totals(data: QuotationPreviewRequest) -> QuotationTotalsOut:
    totals = calculate_quotation_totals(
        data.items,
        discount_percentage=data.discount_percentage,
        discount_amount=data.discount_amount,
        tax_percentage=data.tax_percentage,
        shipping_amount=data.shipping_amount,
    )
    line_totals = [
        float(calculate_line_total(i.quantity, i.unit_price, i.discount_percentage, i.discount_amount))
        for i in data.items
    ]
    return QuotationTotalsOut(**{k: float(v) for k, v in totals.as_dict().items()}, line_totals=line_totals)


# --------------------------
# CREATE QUOTATION
# --------------------------
async def create_quotation(db: AsyncSession, data: QuotationCreate, current_user) -> QuotationResponse:
    try:
        valid_until = to_utc(data.valid_until) if data.valid_until else _utcnow() + timedelta(days=QUOTATION_VALIDITY_DAYS)

        quotation = Quotation(
            quotation_number=f"TEMP-{uuid4().hex}",
            customer_name=data.customer_name,
            customer_email=data.customer_email,
            customer_phone=data.customer_phone,
            customer_company=data.customer_company,
            customer_address=data.customer_address,
            status=QuotationStatus.DRAFT.value,
            valid_until=valid_until,
            discount_percentage=data.discount_percentage,
            discount_amount=data.discount_amount,
            tax_percentage=data.tax_percentage,
            shipping_amount=data.shipping_amount,
            currency=(data.currency or DEFAULT_CURRENCY).upper(),
            notes=data.notes,
            internal_notes=data.internal_notes,
            terms_and_conditions=data.terms_and_conditions,
            created_by=current_user.id,
            items=[],
            status_history=[],
        )

        for position, item_data in enumerate(data.items):
            quotation.items.append(await _snapshot_item(db, item_data, position))

        quotation.calculate_totals()
        _record_status(quotation, None, QuotationStatus.DRAFT, current_user.id)

        db.add(quotation)
        await db.flush()

        # Final number once the id is known
        today_str = _utcnow().strftime("%Y%m%d")
        quotation.quotation_number = f"{QUOTATION_NUMBER_PREFIX}-{today_str}-{quotation.id:04d}"

        log_user_activity(
            db,
            current_user,
            action="create",
            quotation=quotation,
            message=(
                f"Created Quotation '{quotation.quotation_number}' for '{quotation.customer_name}' "
                f"with {len(quotation.items)} items. "
                f"Total Amount: {format_currency(quotation.total_amount, quotation.currency)}."
            )
        )

        await db.commit()
        logger.info("Quotation %s created by %s", quotation.quotation_number, current_user.username)

        quotation = await _load_quotation(db, quotation.id)
        return QuotationResponse(
            message="Quotation created successfully", data=to_quotation_out(quotation, user=current_user)
        )

    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Error creating quotation")
        raise HTTPException(status_code=500, detail=f"Error creating quotation: {str(e)}")


# --------------------------
# GET SINGLE QUOTATION BY ID
# --------------------------
async def get_quotation(db: AsyncSession, quotation_id: int, include_history: bool = False,
                        current_user=None) -> QuotationResponse:
    quotation = await _load_quotation(db, quotation_id)
    return QuotationResponse(
        message="Quotation retrieved successfully",
        data=to_quotation_out(quotation, include_history=include_history, user=current_user),
    )


# --------------------------
# LIST QUOTATIONS (filtered + paginated)
# --------------------------
async def list_quotations(
    db: AsyncSession,
    status: Optional[List[str]] = None,
    customer_email: Optional[str] = None,
    customer_name: Optional[str] = None,
    created_by: Optional[int] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    valid_from: Optional[datetime] = None,
    valid_to: Optional[datetime] = None,
    min_amount: Optional[Decimal] = None,
    max_amount: Optional[Decimal] = None,
    search: Optional[str] = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    limit: int = 20,
    offset: int = 0,
    current_user=None,
) -> QuotationListResponse:
    conditions = []

    if status:
        conditions.append(Quotation.status.in_(status))
    if customer_email:
        conditions.append(Quotation.customer_email.ilike(customer_email))
    if customer_name:
        conditions.append(Quotation.customer_name.ilike(f"%{customer_name}%"))
    if created_by is not None:
        conditions.append(Quotation.created_by == created_by)
    if date_from:
        conditions.append(Quotation.created_at >= to_utc(date_from))
    if date_to:
        conditions.append(Quotation.created_at <= to_utc(date_to))
    if valid_from:
        conditions.append(Quotation.valid_until >= to_utc(valid_from))
    if valid_to:
        conditions.append(Quotation.valid_until <= to_utc(valid_to))
    if min_amount is not None:
        conditions.append(Quotation.total_amount >= min_amount)
    if max_amount is not None:
        conditions.append(Quotation.total_amount <= max_amount)
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(
            Quotation.quotation_number.ilike(pattern),
            Quotation.customer_name.ilike(pattern),
            Quotation.customer_email.ilike(pattern),
            Quotation.customer_company.ilike(pattern),
        ))

    total = (await db.execute(select(func.count(Quotation.id)).where(*conditions))).scalar_one()

    column = SORTABLE_COLUMNS.get(sort_by)
    if column is None:
        raise HTTPException(status_code=400, detail=f"Cannot sort by '{sort_by}'")
    ordering = [column.asc(), Quotation.id.asc()] if sort_order == "asc" else [column.desc(), Quotation.id.desc()]

    result = await db.execute(
        select(Quotation)
        .options(selectinload(Quotation.items))
        .where(*conditions)
        .order_by(*ordering)
        .offset(offset)
        .limit(limit)
    )
    quotations = result.scalars().all()

    return QuotationListResponse(
        message="Quotations retrieved successfully",
        data=[to_quotation_out(q, user=current_user) for q in quotations],
        pagination=Pagination(
            total=total,
            limit=limit,
            offset=offset,
            has_next=offset + len(quotations) < total,
            has_prev=offset > 0,
        ),
    )


# --------------------------
# UPDATE QUOTATION
# --------------------------
async def update_quotation(db: AsyncSession, quotation_id: int, data: QuotationUpdate, current_user) -> QuotationResponse:
    quotation = await _load_quotation(db, quotation_id)
    _ensure_editable(quotation)

    try:
        fields = data.model_dump(exclude_unset=True, exclude={"items"})
        for key, value in fields.items():
            if value is None and key in {"customer_name", "customer_email", "discount_percentage",
                                         "discount_amount", "tax_percentage", "shipping_amount", "currency",
                                         "valid_until"}:
                continue
            if key == "valid_until":
                value = to_utc(value)
            if key == "currency":
                value = value.upper()
            setattr(quotation, key, value)

        if data.items is not None:
            existing_items = {item.id: item for item in quotation.items}
            kept_ids = set()
            new_items = []

            for position, item_data in enumerate(data.items):
                if item_data.id is None:
                    new_items.append(await _snapshot_item(db, item_data, position))
                    continue

                item = existing_items.get(item_data.id)
                if not item:
                    raise HTTPException(
                        status_code=404,
                        detail=f"Quotation item with id {item_data.id} not found. Existing IDs: {list(existing_items)}"
                    )
                if item.product_id != item_data.product_id:
                    replacement = await _snapshot_item(db, item_data, position)
                    item.product_id = replacement.product_id
                    item.product_name = replacement.product_name
                    item.product_sku = replacement.product_sku
                    item.product_description = replacement.product_description
                    item.unit_price = replacement.unit_price
                elif item_data.unit_price is not None:
                    item.unit_price = item_data.unit_price
                item.quantity = item_data.quantity
                item.discount_percentage = item_data.discount_percentage
                item.discount_amount = item_data.discount_amount
                item.sort_order = item_data.sort_order if item_data.sort_order is not None else position
                kept_ids.add(item.id)

            for item_id, item in existing_items.items():
                if item_id not in kept_ids:
                    quotation.items.remove(item)
            quotation.items.extend(new_items)

        quotation.calculate_totals()

        log_user_activity(
            db,
            current_user,
            action=QuotationAction.EDIT,
            quotation=quotation,
            message=(
                f"Updated Quotation '{quotation.quotation_number}' by '{current_user.username}'. "
                f"Items Count: {len(quotation.items)}, "
                f"Total Amount: {format_currency(quotation.total_amount, quotation.currency)}."
            )
        )

        await db.commit()

    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Error updating quotation %s", quotation_id)
        raise HTTPException(status_code=500, detail=f"Error updating quotation: {str(e)}")

    quotation = await _load_quotation(db, quotation_id)
    return QuotationResponse(
        message="Quotation updated successfully", data=to_quotation_out(quotation, user=current_user)
    )


# --------------------------
# DELETE QUOTATION (drafts only)
# --------------------------
async def delete_quotation(db: AsyncSession, quotation_id: int, current_user) -> QuotationResponse:
    quotation = await _load_quotation(db, quotation_id)
    if not can_delete(quotation):
        raise HTTPException(status_code=400, detail="Only draft quotations can be deleted")

    log_user_activity(
        db,
        current_user,
        action=QuotationAction.DELETE,
        quotation=quotation,
        message=f"Deleted draft Quotation '{quotation.quotation_number}' for '{quotation.customer_name}'."
    )
    await db.delete(quotation)
    await db.commit()
    return QuotationResponse(message="Quotation deleted successfully", data=None)


# --------------------------
# STATUS CHANGES
# --------------------------
def _stamp_transition(quotation: Quotation, target: QuotationStatus, user_id: Optional[int], now: datetime):
    if target == QuotationStatus.SENT:
        quotation.sent_at = now
    elif target == QuotationStatus.APPROVED:
        quotation.approved_by = user_id
        quotation.approved_at = now


async def change_status(db: AsyncSession, quotation_id: int, data: QuotationStatusChange, current_user) -> QuotationResponse:
    if data.status == QuotationStatus.CONVERTED:
        result = await convert_quotation(db, quotation_id, current_user, customer_notes=data.notes)
        return QuotationResponse(message="Quotation converted successfully", data=result.quotation)

    if data.status in ADMIN_ONLY_TARGETS and not has_role(current_user, UserRole.ADMIN):
        raise HTTPException(status_code=403, detail="Permission denied")

    quotation = await _load_quotation(db, quotation_id)
    now = _utcnow()
    if not can_transition(quotation, data.status, now):
        raise HTTPException(
            status_code=400,
            detail=(
                f"Cannot change quotation status from '{effective_status(quotation, now).value}' "
                f"to '{data.status.value}'"
            ),
        )

    old_status = quotation.status
    quotation.status = data.status.value
    _stamp_transition(quotation, data.status, current_user.id, now)
    _record_status(quotation, old_status, data.status, current_user.id, data.reason, data.notes)

    log_user_activity(
        db,
        current_user,
        action=data.status.value,
        quotation=quotation,
        message=(
            f"Quotation '{quotation.quotation_number}' moved from {format_status(old_status)} "
            f"to {format_status(data.status)}. "
            f"Total Amount: {format_currency(quotation.total_amount, quotation.currency)}."
        )
    )
    await db.commit()
    logger.info("Quotation %s: %s -> %s", quotation.quotation_number, old_status, data.status.value)

    quotation = await _load_quotation(db, quotation_id)
    return QuotationResponse(
        message=f"Quotation status changed to {data.status.value}",
        data=to_quotation_out(quotation, include_history=True, user=current_user),
    )


async def send_quotation(db: AsyncSession, quotation_id: int, current_user, notes: Optional[str] = None) -> QuotationResponse:
    return await change_status(
        db, quotation_id, QuotationStatusChange(status=QuotationStatus.SENT, notes=notes), current_user
    )


async def approve_quotation(db: AsyncSession, quotation_id: int, current_user,
                            reason: Optional[str] = None, notes: Optional[str] = None) -> QuotationResponse:
    return await change_status(
        db, quotation_id, QuotationStatusChange(status=QuotationStatus.APPROVED, reason=reason, notes=notes), current_user
    )


async def reject_quotation(db: AsyncSession, quotation_id: int, current_user,
                           reason: str, notes: Optional[str] = None) -> QuotationResponse:
    return await change_status(
        db, quotation_id, QuotationStatusChange(status=QuotationStatus.REJECTED, reason=reason, notes=notes), current_user
    )


# --------------------------
# CONVERT TO ORDER
# --------------------------
async def convert_quotation(db: AsyncSession, quotation_id: int, current_user,
                            customer_notes: Optional[str] = None) -> QuotationConversionOut:
    if not has_role(current_user, UserRole.ADMIN):
        raise HTTPException(status_code=403, detail="Permission denied")

    quotation = await _load_quotation(db, quotation_id)
    now = _utcnow()
    if not can_convert(quotation, now):
        if quotation.converted_order_id:
            detail = f"Quotation already converted to order {quotation.converted_order_id}"
        else:
            detail = f"Quotation is {effective_status(quotation, now).value}; only valid approved quotations can be converted"
        raise HTTPException(status_code=400, detail=detail)

    try:
        order = SalesOrder(
            quotation_id=quotation.id,
            quotation_snapshot=to_quotation_out(quotation, now=now).model_dump(mode="json"),
            customer_name=quotation.customer_name,
            customer_email=quotation.customer_email,
            total_amount=quotation.total_amount,
            currency=quotation.currency,
            customer_notes=customer_notes,
            created_by=current_user.id,
        )
        db.add(order)
        await db.flush()

        old_status = quotation.status
        quotation.converted_order_id = order.id
        quotation.status = QuotationStatus.CONVERTED.value
        _record_status(quotation, old_status, QuotationStatus.CONVERTED, current_user.id,
                       notes=f"Converted to order {order.id}")

        log_user_activity(
            db,
            current_user,
            action=QuotationAction.CONVERT,
            quotation=quotation,
            message=(
                f"Converted Quotation '{quotation.quotation_number}' to Sales Order #{order.id}. "
                f"Total Amount: {format_currency(quotation.total_amount, quotation.currency)}."
            )
        )
        await db.commit()

    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Error converting quotation %s", quotation_id)
        raise HTTPException(status_code=500, detail=f"Error converting quotation: {str(e)}")

    order_out = SalesOrderOut.model_validate(order)
    quotation = await _load_quotation(db, quotation_id)
    return QuotationConversionOut(
        quotation=to_quotation_out(quotation, include_history=True, user=current_user), order=order_out
    )


# --------------------------
# MARK EXPIRED
# --------------------------
async def mark_expired_quotations(db: AsyncSession, current_user=None) -> int:
    """Persist the expiration of sent/approved quotations past their validity date."""
    now = _utcnow()
    result = await db.execute(
        select(Quotation)
        .options(selectinload(Quotation.status_history))
        .where(
            Quotation.status.in_([QuotationStatus.SENT.value, QuotationStatus.APPROVED.value]),
            Quotation.valid_until < now,
        )
    )
    expired = [q for q in result.scalars().all() if is_expired(q, now)]

    user_id = current_user.id if current_user else None
    for quotation in expired:
        old_status = quotation.status
        quotation.status = QuotationStatus.EXPIRED.value
        _record_status(quotation, old_status, QuotationStatus.EXPIRED, user_id, reason="Validity period ended")

    if expired:
        log_user_activity(
            db,
            current_user,
            action="expire",
            message=f"Marked {len(expired)} quotations as expired",
        )
    await db.commit()
    logger.info("Marked %d quotations as expired", len(expired))
    return len(expired)


# --------------------------
# DUPLICATE
# --------------------------
async def duplicate_quotation(db: AsyncSession, quotation_id: int, current_user) -> QuotationResponse:
    original = await _load_quotation(db, quotation_id)

    copy = Quotation(
        quotation_number=f"TEMP-{uuid4().hex}",
        customer_name=original.customer_name,
        customer_email=original.customer_email,
        customer_phone=original.customer_phone,
        customer_company=original.customer_company,
        customer_address=original.customer_address,
        status=QuotationStatus.DRAFT.value,
        valid_until=_utcnow() + timedelta(days=QUOTATION_VALIDITY_DAYS),
        discount_percentage=original.discount_percentage,
        discount_amount=original.discount_amount,
        tax_percentage=original.tax_percentage,
        shipping_amount=original.shipping_amount,
        currency=original.currency,
        notes=original.notes,
        internal_notes=original.internal_notes,
        terms_and_conditions=original.terms_and_conditions,
        created_by=current_user.id,
        items=[
            QuotationItem(
                product_id=item.product_id,
                product_name=item.product_name,
                product_sku=item.product_sku,
                product_description=item.product_description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                discount_percentage=item.discount_percentage,
                discount_amount=item.discount_amount,
                sort_order=item.sort_order,
            )
            for item in original.items
        ],
        status_history=[],
    )
    copy.calculate_totals()
    _record_status(copy, None, QuotationStatus.DRAFT, current_user.id,
                   notes=f"Duplicated from {original.quotation_number}")

    db.add(copy)
    await db.flush()
    copy.quotation_number = f"{QUOTATION_NUMBER_PREFIX}-{_utcnow():%Y%m%d}-{copy.id:04d}"

    log_user_activity(
        db,
        current_user,
        action=QuotationAction.DUPLICATE,
        quotation=copy,
        message=f"Duplicated Quotation '{original.quotation_number}' as '{copy.quotation_number}'."
    )
    await db.commit()

    copy = await _load_quotation(db, copy.id)
    return QuotationResponse(
        message="Quotation duplicated successfully", data=to_quotation_out(copy, user=current_user)
    )


# --------------------------
# SUMMARY
# --------------------------
async def get_quotation_summary(db: AsyncSession, current_user=None) -> QuotationSummaryOut:
    rows = (
        await db.execute(
            select(Quotation.status, func.count(Quotation.id), func.coalesce(func.sum(Quotation.total_amount), 0))
            .group_by(Quotation.status)
        )
    ).all()

    by_status = {status.value: 0 for status in QuotationStatus}
    total_count = 0
    total_value = Decimal("0")
    for status, count, value in rows:
        by_status[status] = count
        total_count += count
        total_value += Decimal(str(value))

    average = total_value / total_count if total_count else Decimal("0")
    conversion_rate = (
        Decimal(by_status[QuotationStatus.CONVERTED.value]) * 100 / total_count if total_count else Decimal("0")
    )

    recent = (
        await db.execute(
            select(Quotation)
            .options(selectinload(Quotation.items))
            .order_by(Quotation.created_at.desc(), Quotation.id.desc())
            .limit(5)
        )
    ).scalars().all()

    return QuotationSummaryOut(
        total_quotations=total_count,
        total_value=float(round(total_value, 2)),
        average_quotation_value=float(round(average, 2)),
        quotations_by_status=by_status,
        conversion_rate=float(round(conversion_rate, 2)),
        recent_quotations=[to_quotation_out(q, user=current_user) for q in recent],
    )


# --------------------------
# PDF
# --------------------------
async def generate_quotation_pdf(db: AsyncSession, quotation_id: int) -> bytes:
    quotation = await _load_quotation(db, quotation_id)
    currency = quotation.currency
    styles = getSampleStyleSheet()

    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, title=quotation.quotation_number)
    elements = [
        Paragraph(f"Quotation {quotation.quotation_number}", styles["Title"]),
        Paragraph(f"Status: {format_status(effective_status(quotation))}", styles["Normal"]),
        Paragraph(f"Valid until: {format_date(quotation.valid_until)}", styles["Normal"]),
        Spacer(1, 12),
        Paragraph(f"<b>{quotation.customer_name}</b>", styles["Normal"]),
    ]
    for line in (quotation.customer_company, quotation.customer_email,
                 quotation.customer_phone, quotation.customer_address):
        if line:
            elements.append(Paragraph(line, styles["Normal"]))
    elements.append(Spacer(1, 18))

    rows = [["#", "Product", "SKU", "Qty", "Unit Price", "Discount", "Line Total"]]
    for index, item in enumerate(quotation.items, start=1):
        if item.discount_percentage and item.discount_percentage > 0:
            discount = f"{item.discount_percentage:g}%"
        elif item.discount_amount and item.discount_amount > 0:
            discount = format_currency(item.discount_amount, currency)
        else:
            discount = "-"
        rows.append([
            str(index),
            item.product_name,
            item.product_sku or "",
            str(item.quantity),
            format_currency(item.unit_price, currency),
            discount,
            format_currency(item.line_total, currency),
        ])

    items_table = Table(rows, repeatRows=1)
    items_table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#2f3b52")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("ALIGN", (3, 1), (-1, -1), "RIGHT"),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
    ]))
    elements.extend([items_table, Spacer(1, 12)])

    totals_rows = [["Subtotal", format_currency(quotation.subtotal, currency)]]
    if quotation.discount_total and quotation.discount_total > 0:
        label = "Discount"
        if quotation.discount_percentage and quotation.discount_percentage > 0:
            label = f"Discount ({quotation.discount_percentage:g}%)"
        totals_rows.append([label, f"-{format_currency(quotation.discount_total, currency)}"])
    totals_rows.append([f"Tax ({quotation.tax_percentage:g}%)", format_currency(quotation.tax_amount, currency)])
    totals_rows.append(["Shipping", format_currency(quotation.shipping_amount, currency)])
    totals_rows.append(["Total", format_currency(quotation.total_amount, currency)])

    totals_table = Table(totals_rows, hAlign="RIGHT")
    totals_table.setStyle(TableStyle([
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("LINEABOVE", (0, -1), (-1, -1), 0.5, colors.black),
    ]))
    elements.append(totals_table)

    if quotation.notes:
        elements.extend([Spacer(1, 18), Paragraph("Notes", styles["Heading3"]), Paragraph(quotation.notes, styles["Normal"])])
    if quotation.terms_and_conditions:
        elements.extend([
            Spacer(1, 12),
            Paragraph("Terms and Conditions", styles["Heading3"]),
            Paragraph(quotation.terms_and_conditions, styles["Normal"]),
        ])

    doc.build(elements)
    return buffer.getvalue()
