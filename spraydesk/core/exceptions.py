"""Domain error taxonomy.

Every error carries a stable ``code`` and an HTTP ``status_code`` so the
application-level handler can render it into an ``ErrorResponse`` without
the service layer knowing about HTTP.
"""

from decimal import Decimal
from typing import Optional

from fastapi import status
from sqlalchemy.exc import DBAPIError, OperationalError


class ShopError(Exception):
    """Base class for errors that map onto a user-visible error response"""

    code = "SHOP_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PaymentError(ShopError):
    """A proposed payment was rejected before anything was persisted"""


class InvalidAmount(PaymentError):
    code = "INVALID_AMOUNT"

    def __init__(self, raw_amount: object = None, message: Optional[str] = None):
        self.raw_amount = raw_amount
        super().__init__(message or "Please enter a valid payment amount greater than zero")


class ExceedsRemainingBalance(PaymentError):
    code = "EXCEEDS_REMAINING_BALANCE"

    def __init__(self, amount: Decimal, remaining: Decimal):
        self.amount = amount
        self.remaining = remaining
        super().__init__(
            f"Payment of {amount:.2f} exceeds the remaining balance of {remaining:.2f}"
        )


class PaymentConflict(PaymentError):
    """The invoice changed between read and write and retries ran out"""

    code = "PAYMENT_CONFLICT"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, invoice_id: object):
        self.invoice_id = invoice_id
        super().__init__(
            "The invoice was updated by someone else while this payment was being "
            "recorded. Reload the invoice and try again."
        )


class LedgerMismatch(ShopError):
    """Recorded payments do not add up to the invoice's paid amount"""

    code = "LEDGER_MISMATCH"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, invoice_id: object, paid_amount: Decimal, payments_total: Decimal):
        self.invoice_id = invoice_id
        self.paid_amount = paid_amount
        self.payments_total = payments_total
        super().__init__(
            f"Invoice paid amount {paid_amount:.2f} does not match recorded payments "
            f"totalling {payments_total:.2f}; the invoice needs reconciliation"
        )


class PersistenceUnavailable(ShopError):
    code = "PERSISTENCE_UNAVAILABLE"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = "The database is unavailable right now. Please try again shortly."):
        super().__init__(message)


class ResourceNotFound(ShopError):
    code = "RESOURCE_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: object):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} {resource_id} does not exist")


def is_connection_error(exc: BaseException) -> bool:
    """True when a database error means the server could not be reached."""
    if isinstance(exc, OperationalError):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return isinstance(exc, OSError)
