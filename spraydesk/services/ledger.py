"""Invoice Ledger - payment validation and status derivation

Pure functions over an invoice snapshot. Nothing here touches the database:
``validate_payment`` returns the state transition as data and the caller
persists it (see ``InvoiceService.record_payment``).
"""

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Any, Iterable, Optional

from spraydesk.core.exceptions import InvalidAmount, ExceedsRemainingBalance
from spraydesk.models.enums import InvoiceStatus
from spraydesk.utils.time import get_utc_today

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


@dataclass(frozen=True)
class InvoiceSnapshot:
    """The ledger-relevant part of an invoice as read at one point in time"""
    id: Any
    total: Decimal
    paid_amount: Decimal = ZERO

    @classmethod
    def of(cls, invoice: Any) -> "InvoiceSnapshot":
        """Build a snapshot from anything with ``id``, ``total`` and ``paid_amount``."""
        return cls(
            id=invoice.id,
            total=to_money(invoice.total),
            paid_amount=to_money(invoice.paid_amount or ZERO),
        )

    @property
    def status(self) -> InvoiceStatus:
        return derive_status(self.total, self.paid_amount)


@dataclass(frozen=True)
class ValidatedPayment:
    """A payment that passed validation, plus the invoice state it produces"""
    invoice_id: Any
    amount: Decimal
    date: date
    previous_paid_amount: Decimal
    new_paid_amount: Decimal
    new_status: InvoiceStatus
    remaining: Decimal

    def apply_to(self, snapshot: InvoiceSnapshot) -> InvoiceSnapshot:
        """Return the snapshot as it looks once this payment is committed."""
        if snapshot.paid_amount != self.previous_paid_amount:
            raise ValueError("payment was validated against a different snapshot")
        return replace(snapshot, paid_amount=self.new_paid_amount)


@dataclass(frozen=True)
class Reconciliation:
    """Result of comparing an invoice's paid amount with its payment rows"""
    invoice_id: Any
    paid_amount: Decimal
    payments_total: Decimal
    payment_count: int
    recorded_status: Optional[InvoiceStatus]
    expected_status: InvoiceStatus

    @property
    def difference(self) -> Decimal:
        return self.paid_amount - self.payments_total

    @property
    def is_consistent(self) -> bool:
        status_ok = self.recorded_status is None or self.recorded_status == self.expected_status
        return self.difference == ZERO and status_ok


def to_money(value: Any) -> Decimal:
    """Coerce a stored numeric value to a 2dp Decimal."""
    if isinstance(value, Decimal):
        return value.quantize(CENT)
    return Decimal(str(value)).quantize(CENT)


def parse_amount(raw: Any) -> Decimal:
    """
    Parse user input into a monetary amount.

    Accepts Decimal, int, float and numeric strings. Anything that is not a
    finite number with at most two decimal places raises InvalidAmount.
    """
    if isinstance(raw, bool) or raw is None:
        raise InvalidAmount(raw)

    if isinstance(raw, Decimal):
        amount = raw
    elif isinstance(raw, (int, float)):
        amount = Decimal(str(raw))
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise InvalidAmount(raw)
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise InvalidAmount(raw)
    else:
        raise InvalidAmount(raw)

    if not amount.is_finite():
        raise InvalidAmount(raw)
    try:
        cents = amount.quantize(CENT, rounding=ROUND_DOWN)
    except InvalidOperation:
        raise InvalidAmount(raw)
    if cents != amount:
        raise InvalidAmount(raw, "Payment amounts are limited to two decimal places")
    return cents


def compute_remaining(invoice: Any) -> Decimal:
    """Outstanding balance ``total - paid_amount``; never negative."""
    snapshot = invoice if isinstance(invoice, InvoiceSnapshot) else InvoiceSnapshot.of(invoice)
    remaining = snapshot.total - snapshot.paid_amount
    return remaining if remaining > ZERO else ZERO


def derive_status(total: Decimal, paid_amount: Decimal) -> InvoiceStatus:
    """
    Status as a function of (total, paid_amount).

    Nothing paid is Pending, including a zero-total invoice.
    """
    if paid_amount < 0:
        raise ValueError("paid_amount must not be negative")
    if paid_amount == 0:
        return InvoiceStatus.PENDING
    if paid_amount >= total:
        return InvoiceStatus.PAID
    return InvoiceStatus.PARTIALLY_PAID


def validate_payment(
    invoice: Any,
    proposed_amount: Any,
    payment_date: Optional[date] = None,
) -> ValidatedPayment:
    """
    Check a proposed payment against an invoice snapshot.

    Raises InvalidAmount for non-numeric, zero or negative input and
    ExceedsRemainingBalance when it would overdraw the invoice. On success
    returns the payment to append and the invoice's new paid amount and
    status, which must be persisted together.
    """
    snapshot = invoice if isinstance(invoice, InvoiceSnapshot) else InvoiceSnapshot.of(invoice)

    amount = parse_amount(proposed_amount)
    if amount <= ZERO:
        raise InvalidAmount(proposed_amount)

    remaining = compute_remaining(snapshot)
    if amount > remaining:
        raise ExceedsRemainingBalance(amount, remaining)

    new_paid_amount = snapshot.paid_amount + amount
    return ValidatedPayment(
        invoice_id=snapshot.id,
        amount=amount,
        date=payment_date or get_utc_today(),
        previous_paid_amount=snapshot.paid_amount,
        new_paid_amount=new_paid_amount,
        new_status=derive_status(snapshot.total, new_paid_amount),
        remaining=remaining - amount,
    )


def compute_invoice_total(line_items: Iterable[Any]) -> Decimal:
    """Sum of line item prices. Items may be mappings or objects with ``price``."""
    total = ZERO
    for item in line_items:
        price = item["price"] if isinstance(item, dict) else item.price
        total += to_money(price)
    return total


def reconcile(invoice: Any, payments: Iterable[Any]) -> Reconciliation:
    """Compare the invoice's paid amount and status with its payment rows."""
    snapshot = InvoiceSnapshot.of(invoice)
    amounts = [to_money(p["amount"] if isinstance(p, dict) else p.amount) for p in payments]
    recorded = getattr(invoice, "status", None)
    return Reconciliation(
        invoice_id=snapshot.id,
        paid_amount=snapshot.paid_amount,
        payments_total=sum(amounts, ZERO),
        payment_count=len(amounts),
        recorded_status=InvoiceStatus(recorded) if recorded is not None else None,
        expected_status=snapshot.status,
    )
