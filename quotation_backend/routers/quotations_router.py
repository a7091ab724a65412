# quotation_backend/routers/quotations_router.py
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from quotation_backend.core.db import get_db
from quotation_backend.core.enums import UserRole
from quotation_backend.schemas.quotation_schema import (
    MarkExpiredOut,
    QuotationActionsOut,
    QuotationApproveRequest,
    QuotationConversionOut,
    QuotationConvertRequest,
    QuotationCreate,
    QuotationListResponse,
    QuotationPreviewRequest,
    QuotationRejectRequest,
    QuotationResponse,
    QuotationStatusChange,
    QuotationSummaryOut,
    QuotationTotalsOut,
    QuotationUpdate,
)
from quotation_backend.schemas.response_schemas import ResponseMessage
from quotation_backend.services import quotation_service
from quotation_backend.services.quotation_status_service import allowed_actions, effective_status
from quotation_backend.utils.check_roles import require_role
from quotation_backend.utils.get_user import get_current_user

router = APIRouter(prefix="/quotations", tags=["Quotations"])

STAFF = [UserRole.ADMIN, UserRole.SALES]
ADMIN = [UserRole.ADMIN]


# --------------------------
# LIST QUOTATIONS (paginated + filtered)
# --------------------------
@router.get("", response_model=QuotationListResponse)
@require_role(STAFF)
async def list_quotations_route(
    status: Optional[str] = Query(None, description="One status or a comma separated list"),
    customer_email: Optional[str] = Query(None),
    customer_name: Optional[str] = Query(None),
    created_by: Optional[int] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    valid_from: Optional[datetime] = Query(None),
    valid_to: Optional[datetime] = Query(None),
    min_amount: Optional[Decimal] = Query(None, ge=0),
    max_amount: Optional[Decimal] = Query(None, ge=0),
    search: Optional[str] = Query(None),
    sort_by: Literal["created_at", "valid_until", "total_amount", "status", "quotation_number"] = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    statuses = [s.strip() for s in status.split(",") if s.strip()] if status else None
    return await quotation_service.list_quotations(
        db,
        status=statuses,
        customer_email=customer_email,
        customer_name=customer_name,
        created_by=created_by,
        date_from=date_from,
        date_to=date_to,
        valid_from=valid_from,
        valid_to=valid_to,
        min_amount=min_amount,
        max_amount=max_amount,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
        current_user=_user,
    )


# --------------------------
# CREATE QUOTATION
# --------------------------
@router.post("", response_model=QuotationResponse, status_code=status.HTTP_201_CREATED)
@require_role(STAFF)
async def create_quotation_route(
    data: QuotationCreate,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await quotation_service.create_quotation(db, data, _user)


# --------------------------
# SUMMARY
# --------------------------
@router.get("/summary", response_model=ResponseMessage[QuotationSummaryOut])
@require_role(STAFF)
async def quotation_summary_route(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    summary = await quotation_service.get_quotation_summary(db, _user)
    return ResponseMessage[QuotationSummaryOut](message="Quotation summary retrieved successfully", data=summary)


# --------------------------
# LIVE TOTALS PREVIEW
# --------------------------
@router.post("/preview", response_model=ResponseMessage[QuotationTotalsOut])
@require_role(STAFF)
async def preview_totals_route(
    data: QuotationPreviewRequest,
    _user=Depends(get_current_user),
):
    return ResponseMessage[QuotationTotalsOut](
        message="Totals calculated", data=quotation_service.preview_totals(data)
    )


# --------------------------
# MARK EXPIRED
# --------------------------
@router.post("/mark-expired", response_model=ResponseMessage[MarkExpiredOut])
@require_role(ADMIN)
async def mark_expired_route(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    count = await quotation_service.mark_expired_quotations(db, _user)
    return ResponseMessage[MarkExpiredOut](
        message=f"{count} quotations marked as expired", data=MarkExpiredOut(expired_count=count)
    )


# --------------------------
# GET SINGLE QUOTATION BY ID
# --------------------------
@router.get("/{quotation_id}", response_model=QuotationResponse)
@require_role(STAFF)
async def get_quotation_route(
    quotation_id: int,
    include_history: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await quotation_service.get_quotation(
        db, quotation_id, include_history=include_history, current_user=_user
    )


# --------------------------
# UPDATE QUOTATION
# --------------------------
@router.put("/{quotation_id}", response_model=QuotationResponse)
@require_role(STAFF)
async def update_quotation_route(
    quotation_id: int,
    data: QuotationUpdate,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await quotation_service.update_quotation(db, quotation_id, data, _user)


# --------------------------
# DELETE QUOTATION (drafts only)
# --------------------------
@router.delete("/{quotation_id}", response_model=QuotationResponse)
@require_role(ADMIN)
async def delete_quotation_route(
    quotation_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await quotation_service.delete_quotation(db, quotation_id, _user)


# --------------------------
# STATUS CHANGES
# --------------------------
@router.post("/{quotation_id}/status", response_model=QuotationResponse)
@require_role(STAFF)
async def change_status_route(
    quotation_id: int,
    data: QuotationStatusChange,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await quotation_service.change_status(db, quotation_id, data, _user)


@router.post("/{quotation_id}/approve", response_model=QuotationResponse)
@require_role(ADMIN)
async def approve_quotation_route(
    quotation_id: int,
    data: Optional[QuotationApproveRequest] = None,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    data = data or QuotationApproveRequest()
    return await quotation_service.approve_quotation(db, quotation_id, _user, reason=data.reason, notes=data.notes)


@router.post("/{quotation_id}/reject", response_model=QuotationResponse)
@require_role(ADMIN)
async def reject_quotation_route(
    quotation_id: int,
    data: QuotationRejectRequest,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await quotation_service.reject_quotation(db, quotation_id, _user, reason=data.reason, notes=data.notes)


@router.post("/{quotation_id}/convert", response_model=ResponseMessage[QuotationConversionOut])
@require_role(ADMIN)
async def convert_quotation_route(
    quotation_id: int,
    data: Optional[QuotationConvertRequest] = None,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    data = data or QuotationConvertRequest()
    result = await quotation_service.convert_quotation(db, quotation_id, _user, customer_notes=data.customer_notes)
    return ResponseMessage[QuotationConversionOut](message="Quotation converted to order", data=result)


@router.post("/{quotation_id}/duplicate", response_model=QuotationResponse, status_code=status.HTTP_201_CREATED)
@require_role(STAFF)
async def duplicate_quotation_route(
    quotation_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await quotation_service.duplicate_quotation(db, quotation_id, _user)


# --------------------------
# AVAILABLE ACTIONS
# --------------------------
@router.get("/{quotation_id}/actions", response_model=ResponseMessage[QuotationActionsOut])
@require_role(STAFF)
async def quotation_actions_route(
    quotation_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    quotation = (await quotation_service.get_quotation(db, quotation_id)).data
    actions = QuotationActionsOut(
        status=quotation.status,
        effective_status=effective_status(quotation).value,
        actions=[action.value for action in allowed_actions(quotation, user=_user)],
    )
    return ResponseMessage[QuotationActionsOut](message="Actions retrieved successfully", data=actions)


# --------------------------
# PDF
# --------------------------
@router.get("/{quotation_id}/pdf")
@require_role(STAFF)
async def quotation_pdf_route(
    quotation_id: int,
    download: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    pdf = await quotation_service.generate_quotation_pdf(db, quotation_id)
    disposition = "attachment" if download else "inline"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'{disposition}; filename="quotation-{quotation_id}.pdf"'},
    )
