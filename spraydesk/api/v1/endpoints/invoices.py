"""Invoice endpoints - creation, payments, receipts, reconciliation"""

from typing import Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from spraydesk.api import deps
from spraydesk.models.enums import InvoiceStatus
from spraydesk.models.user import User
from spraydesk.schemas.invoice import (
    InvoiceCreate,
    InvoiceResponse,
    PaymentCreate,
    PaymentResponse,
    PaymentResult,
    ReceiptResponse,
    ReconciliationResponse,
)
from spraydesk.schemas.responses import SuccessResponse
from spraydesk.services.invoice_service import InvoiceService, SERVICE_CATALOG, invoice_summary

router = APIRouter()


@router.get("", response_model=SuccessResponse)
async def list_invoices(
    customer_id: Optional[UUID] = None,
    status: Optional[InvoiceStatus] = None,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    invoices = await InvoiceService.list_invoices(db, customer_id, status)
    return SuccessResponse(data=[InvoiceResponse(**invoice_summary(inv)) for inv in invoices])


@router.get("/catalog", response_model=SuccessResponse)
async def get_service_catalog(current_user: User = Depends(deps.get_current_user)) -> Any:
    """Predefined service descriptions offered when building an invoice."""
    return SuccessResponse(data=SERVICE_CATALOG)


@router.post("", response_model=SuccessResponse)
async def create_invoice(
    invoice_in: InvoiceCreate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Create an invoice; the customer is looked up by id, or by name and created if new."""
    invoice = await InvoiceService.create_invoice(db, invoice_in)
    return SuccessResponse(
        data=InvoiceResponse(**invoice_summary(invoice)),
        message="Invoice created successfully",
    )


@router.get("/{invoice_id}", response_model=SuccessResponse)
async def get_invoice(
    invoice_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    invoice = await InvoiceService.get_invoice(db, invoice_id)
    return SuccessResponse(data=InvoiceResponse(**invoice_summary(invoice)))


@router.get("/{invoice_id}/payments", response_model=SuccessResponse)
async def list_payments(
    invoice_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    payments = await InvoiceService.list_payments(db, invoice_id)
    return SuccessResponse(data=[PaymentResponse.model_validate(p) for p in payments])


@router.post("/{invoice_id}/payments", response_model=SuccessResponse)
async def record_payment(
    invoice_id: UUID,
    payment_in: PaymentCreate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """
    Record a (partial) payment. Rejections come back as INVALID_AMOUNT or
    EXCEEDS_REMAINING_BALANCE; nothing is stored in that case.
    """
    payment, validated = await InvoiceService.record_payment(db, invoice_id, payment_in)
    return SuccessResponse(
        data=PaymentResult(
            payment=PaymentResponse.model_validate(payment),
            invoice_id=invoice_id,
            paid_amount=validated.new_paid_amount,
            remaining=validated.remaining,
            status=validated.new_status,
        ),
        message="Payment recorded successfully",
    )


@router.get("/{invoice_id}/receipt", response_model=SuccessResponse)
async def get_receipt(
    invoice_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    receipt = await InvoiceService.build_receipt(db, invoice_id)
    return SuccessResponse(data=ReceiptResponse(**receipt))


@router.get("/{invoice_id}/reconciliation", response_model=SuccessResponse)
async def get_reconciliation(
    invoice_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Check that recorded payments add up to the invoice's paid amount."""
    result = await InvoiceService.reconcile_invoice(db, invoice_id)
    return SuccessResponse(
        data=ReconciliationResponse(
            invoice_id=result.invoice_id,
            paid_amount=result.paid_amount,
            payments_total=result.payments_total,
            payment_count=result.payment_count,
            difference=result.difference,
            recorded_status=result.recorded_status,
            expected_status=result.expected_status,
            is_consistent=result.is_consistent,
        ),
        message="Ledger balanced" if result.is_consistent else "Ledger needs reconciliation",
    )
