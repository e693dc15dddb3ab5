"""Invoices, their service line items and the payment ledger"""

from decimal import Decimal
from sqlalchemy import Column, Date, Integer, Numeric, String, ForeignKey, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID, ENUM
from sqlalchemy.orm import relationship

from spraydesk.models.base import BaseModel
from spraydesk.models.enums import InvoiceStatus


class Invoice(BaseModel):
    """
    One billable customer visit.

    ``total`` is fixed at creation from the line items. ``paid_amount`` only
    grows, and only through a payment written in the same transaction.
    """
    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint("total >= 0", name="ck_invoices_total_non_negative"),
        CheckConstraint(
            "paid_amount >= 0 AND paid_amount <= total",
            name="ck_invoices_paid_within_total",
        ),
    )

    customer_id = Column(
        UUID(as_uuid=True),
        ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    date = Column(Date, nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    status = Column(
        ENUM(
            InvoiceStatus,
            name="invoice_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        default=InvoiceStatus.PENDING,
        nullable=False,
        index=True,
    )

    customer = relationship("Customer", back_populates="invoices", lazy="selectin")
    services = relationship(
        "ServiceLineItem",
        back_populates="invoice",
        lazy="selectin",
        order_by="ServiceLineItem.position",
    )
    payments = relationship(
        "Payment",
        back_populates="invoice",
        lazy="selectin",
        order_by="Payment.created_at",
    )

    def __repr__(self) -> str:
        return f"<Invoice {self.id} {self.paid_amount}/{self.total} - {self.status}>"


class ServiceLineItem(BaseModel):
    """A priced service on an invoice; immutable once the invoice exists"""
    __tablename__ = "services"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_services_price_non_negative"),
    )

    invoice_id = Column(
        UUID(as_uuid=True),
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False, default=0)
    description = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)

    invoice = relationship("Invoice", back_populates="services")


class Payment(BaseModel):
    """Append-only ledger entry"""
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
    )

    invoice_id = Column(
        UUID(as_uuid=True),
        ForeignKey("invoices.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)
    method = Column(String(50), nullable=True)
    notes = Column(String(500), nullable=True)

    invoice = relationship("Invoice", back_populates="payments")

    def __repr__(self) -> str:
        return f"<Payment {self.amount} on {self.date}>"
