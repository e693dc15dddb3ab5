from typing import Optional, List, Union
from pydantic import BaseModel, Field, ConfigDict, model_validator
from uuid import UUID
from datetime import date as date_type
from decimal import Decimal

from spraydesk.models.enums import InvoiceStatus


class ServiceLineItemCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)


class ServiceLineItemResponse(BaseModel):
    description: str
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class InvoiceCreate(BaseModel):
    """New invoice for an existing customer (by id) or one looked up / created by name."""
    customer_id: Optional[UUID] = None
    customer_name: Optional[str] = Field(None, min_length=1, max_length=255)
    services: List[ServiceLineItemCreate] = Field(..., min_length=1)

    @model_validator(mode="after")
    def require_customer(self) -> "InvoiceCreate":
        if self.customer_id is None and not (self.customer_name and self.customer_name.strip()):
            raise ValueError("Either customer_id or customer_name is required")
        return self


class PaymentCreate(BaseModel):
    # Left loose on purpose so non-numeric input reaches the ledger and gets INVALID_AMOUNT
    amount: Union[Decimal, str]
    date: Optional[date_type] = None
    method: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=500)


class PaymentResponse(BaseModel):
    id: UUID
    invoice_id: UUID
    amount: Decimal
    date: date_type
    method: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class InvoiceResponse(BaseModel):
    id: UUID
    customer_id: UUID
    customer_name: Optional[str] = None
    date: date_type
    total: Decimal
    paid_amount: Decimal
    remaining: Decimal
    status: InvoiceStatus
    services: List[ServiceLineItemResponse] = []
    ledger_consistent: bool = True


class PaymentResult(BaseModel):
    """Outcome of a successfully recorded payment"""
    payment: PaymentResponse
    invoice_id: UUID
    paid_amount: Decimal
    remaining: Decimal
    status: InvoiceStatus


class ReconciliationResponse(BaseModel):
    invoice_id: UUID
    paid_amount: Decimal
    payments_total: Decimal
    payment_count: int
    difference: Decimal
    recorded_status: Optional[InvoiceStatus] = None
    expected_status: InvoiceStatus
    is_consistent: bool


class ReceiptResponse(BaseModel):
    shop_name: str
    shop_tagline: str
    shop_contact: str
    currency: str
    invoice_id: UUID
    date: date_type
    customer_name: str
    services: List[ServiceLineItemResponse]
    total: Decimal
    paid_amount: Decimal
    remaining: Decimal
    status: InvoiceStatus
    payments: List[PaymentResponse]
