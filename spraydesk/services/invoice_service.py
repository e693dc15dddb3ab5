"""Invoice Service - invoices, payments, receipts

Applies ledger decisions to the database. A payment is written as one
transaction: a conditional update of the invoice (guarded on the paid amount
that was validated) plus the payment insert. If the guard misses, another
payment landed first; the invoice is re-read and the payment re-validated.
"""

from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from spraydesk.config import settings
from spraydesk.core.exceptions import (
    LedgerMismatch,
    PaymentConflict,
    PersistenceUnavailable,
    ResourceNotFound,
    is_connection_error,
)
from spraydesk.core.logging import get_logger
from spraydesk.models.customer import Customer
from spraydesk.models.enums import ChangeEventType, FeedTable, InvoiceStatus
from spraydesk.models.invoice import Invoice, Payment, ServiceLineItem
from spraydesk.schemas.customer import CustomerCreate
from spraydesk.schemas.invoice import (
    InvoiceCreate,
    PaymentCreate,
    PaymentResponse,
    ServiceLineItemResponse,
)
from spraydesk.services import ledger
from spraydesk.services.change_feed import change_feed
from spraydesk.services.customer_service import CustomerService
from spraydesk.utils.time import get_utc_now, get_utc_today

logger = get_logger(__name__)

# Offerings shown when building an invoice; free text is also accepted
SERVICE_CATALOG = [
    "Full body spray",
    "Scratch and Dent repair",
    "Body works",
    "Touch up respray",
]


def invoice_summary(invoice: Invoice) -> dict:
    """API shape of an invoice, with remaining balance and a ledger check."""
    reconciliation = ledger.reconcile(invoice, invoice.payments)
    if not reconciliation.is_consistent:
        logger.warning(
            "Invoice ledger out of balance",
            extra={
                "invoice_id": invoice.id,
                "paid_amount": str(reconciliation.paid_amount),
                "payments_total": str(reconciliation.payments_total),
            },
        )
    return {
        "id": invoice.id,
        "customer_id": invoice.customer_id,
        "customer_name": invoice.customer.name if invoice.customer else None,
        "date": invoice.date,
        "total": ledger.to_money(invoice.total),
        "paid_amount": ledger.to_money(invoice.paid_amount),
        "remaining": ledger.compute_remaining(invoice),
        "status": invoice.status,
        "services": [ServiceLineItemResponse.model_validate(line) for line in invoice.services],
        "ledger_consistent": reconciliation.is_consistent,
    }


class InvoiceService:
    """Service layer for invoices and their payment ledger"""

    @staticmethod
    async def _resolve_customer(db: AsyncSession, data: InvoiceCreate) -> Tuple[Customer, bool]:
        """Customer by id, else find-or-create by name. Second item is True if created."""
        if data.customer_id is not None:
            return await CustomerService.get_customer(db, data.customer_id), False

        name = data.customer_name.strip()
        customer = await CustomerService.find_by_name(db, name)
        if customer:
            return customer, False
        logger.info("Creating customer for new invoice", extra={"table": FeedTable.CUSTOMERS.value})
        customer = await CustomerService.create_customer(
            db, CustomerCreate(name=name), auto_commit=False
        )
        return customer, True

    @staticmethod
    async def create_invoice(db: AsyncSession, data: InvoiceCreate) -> Invoice:
        """
        Create an invoice with its line items in a single transaction.

        The total is computed here once and never recomputed.
        """
        customer, created = await InvoiceService._resolve_customer(db, data)
        today = get_utc_today()

        invoice = Invoice(
            customer_id=customer.id,
            date=today,
            total=ledger.compute_invoice_total(data.services),
            paid_amount=ledger.ZERO,
            status=InvoiceStatus.PENDING,
        )
        db.add(invoice)
        await db.flush()

        for position, line in enumerate(data.services):
            db.add(ServiceLineItem(
                invoice_id=invoice.id,
                position=position,
                description=line.description.strip(),
                price=ledger.to_money(line.price),
            ))
        customer.last_visit = today

        await db.commit()
        invoice = await InvoiceService.get_invoice(db, invoice.id)

        logger.info(
            "Invoice created",
            extra={"invoice_id": invoice.id, "total": str(invoice.total)},
        )
        change_feed.publish_row(
            FeedTable.CUSTOMERS,
            ChangeEventType.INSERT if created else ChangeEventType.UPDATE,
            customer,
        )
        change_feed.publish_row(FeedTable.INVOICES, ChangeEventType.INSERT, invoice)
        return invoice

    @staticmethod
    async def get_invoice(db: AsyncSession, invoice_id: UUID) -> Invoice:
        """Fresh read of an invoice; always reloads rather than trusting the identity map."""
        result = await db.execute(
            select(Invoice)
            .where(Invoice.id == invoice_id)
            .execution_options(populate_existing=True)
        )
        invoice = result.scalar_one_or_none()
        if not invoice:
            raise ResourceNotFound("Invoice", invoice_id)
        return invoice

    @staticmethod
    async def list_invoices(
        db: AsyncSession,
        customer_id: Optional[UUID] = None,
        status: Optional[InvoiceStatus] = None,
    ) -> List[Invoice]:
        query = select(Invoice)
        if customer_id:
            query = query.where(Invoice.customer_id == customer_id)
        if status:
            query = query.where(Invoice.status == status)
        result = await db.execute(query.order_by(Invoice.date.desc(), Invoice.created_at.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def list_payments(db: AsyncSession, invoice_id: UUID) -> List[Payment]:
        """Payment history, newest first."""
        await InvoiceService.get_invoice(db, invoice_id)
        result = await db.execute(
            select(Payment)
            .where(Payment.invoice_id == invoice_id)
            .order_by(Payment.date.desc(), Payment.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def _commit_payment(
        db: AsyncSession,
        invoice: Invoice,
        validated: ledger.ValidatedPayment,
        data: PaymentCreate,
    ) -> Optional[Payment]:
        """
        Write the invoice transition and the payment row together.

        Returns None when the invoice no longer has the paid amount the
        payment was validated against.
        """
        result = await db.execute(
            update(Invoice)
            .where(
                Invoice.id == validated.invoice_id,
                Invoice.paid_amount == validated.previous_paid_amount,
                Invoice.total >= validated.new_paid_amount,
            )
            .values(
                paid_amount=validated.new_paid_amount,
                status=validated.new_status,
                updated_at=get_utc_now(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await db.rollback()
            return None

        payment = Payment(
            invoice_id=validated.invoice_id,
            amount=validated.amount,
            date=validated.date,
            method=data.method,
            notes=data.notes,
        )
        db.add(payment)
        await db.execute(
            update(Customer)
            .where(Customer.id == invoice.customer_id)
            .values(
                total_spent=Customer.total_spent + validated.amount,
                last_visit=validated.date,
                updated_at=get_utc_now(),
            )
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        await db.refresh(payment)
        return payment

    @staticmethod
    async def record_payment(
        db: AsyncSession,
        invoice_id: UUID,
        data: PaymentCreate,
    ) -> Tuple[Payment, ledger.ValidatedPayment]:
        """
        Validate and persist a payment against the latest invoice state.

        Raises:
            InvalidAmount, ExceedsRemainingBalance: the payment was rejected
            LedgerMismatch: existing payments do not add up to the paid amount
            PaymentConflict: concurrent writers kept winning; nothing persisted
            PersistenceUnavailable: the database could not be reached
        """
        attempts = settings.PAYMENT_CONFLICT_RETRIES + 1
        for attempt in range(1, attempts + 1):
            try:
                invoice = await InvoiceService.get_invoice(db, invoice_id)

                reconciliation = ledger.reconcile(invoice, invoice.payments)
                if reconciliation.difference != ledger.ZERO:
                    raise LedgerMismatch(
                        invoice_id, reconciliation.paid_amount, reconciliation.payments_total
                    )

                validated = ledger.validate_payment(
                    ledger.InvoiceSnapshot.of(invoice), data.amount, data.date
                )
                payment = await InvoiceService._commit_payment(db, invoice, validated, data)
            except SQLAlchemyError as exc:
                if is_connection_error(exc):
                    logger.error(
                        "Database unavailable while recording payment",
                        extra={"invoice_id": invoice_id},
                        exc_info=True,
                    )
                    raise PersistenceUnavailable() from exc
                raise

            if payment is None:
                logger.warning(
                    "Payment conflict, re-reading invoice",
                    extra={"invoice_id": invoice_id, "attempt": attempt},
                )
                continue

            logger.info(
                "Payment recorded",
                extra={
                    "invoice_id": invoice_id,
                    "amount": str(validated.amount),
                    "status": validated.new_status.value,
                },
            )
            invoice = await InvoiceService.get_invoice(db, invoice_id)
            change_feed.publish_row(FeedTable.INVOICES, ChangeEventType.UPDATE, invoice)
            change_feed.publish_row(FeedTable.PAYMENTS, ChangeEventType.INSERT, payment)
            # total_spent was bumped in SQL; reload so the event carries the new value
            customer = await db.get(Customer, invoice.customer_id, populate_existing=True)
            if customer is not None:
                change_feed.publish_row(FeedTable.CUSTOMERS, ChangeEventType.UPDATE, customer)
            return payment, validated

        raise PaymentConflict(invoice_id)

    @staticmethod
    async def reconcile_invoice(db: AsyncSession, invoice_id: UUID) -> ledger.Reconciliation:
        invoice = await InvoiceService.get_invoice(db, invoice_id)
        return ledger.reconcile(invoice, invoice.payments)

    @staticmethod
    async def build_receipt(db: AsyncSession, invoice_id: UUID) -> dict:
        """Everything a printed receipt shows: shop header, lines, totals, payments."""
        invoice = await InvoiceService.get_invoice(db, invoice_id)
        payments = await InvoiceService.list_payments(db, invoice_id)
        return {
            "shop_name": settings.SHOP_NAME,
            "shop_tagline": settings.SHOP_TAGLINE,
            "shop_contact": settings.SHOP_CONTACT,
            "currency": settings.CURRENCY,
            "invoice_id": invoice.id,
            "date": invoice.date,
            "customer_name": invoice.customer.name,
            "services": [ServiceLineItemResponse.model_validate(line) for line in invoice.services],
            "total": ledger.to_money(invoice.total),
            "paid_amount": ledger.to_money(invoice.paid_amount),
            "remaining": ledger.compute_remaining(invoice),
            "status": invoice.status,
            "payments": [PaymentResponse.model_validate(p) for p in payments],
        }
