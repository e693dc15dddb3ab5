"""Unit tests for request schemas."""

from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from spraydesk.schemas.auth import SignupRequest
from spraydesk.schemas.customer import CustomerUpdate
from spraydesk.schemas.inventory import InventoryItemCreate, InventoryItemUpdate
from spraydesk.schemas.invoice import InvoiceCreate, PaymentCreate


def test_invoice_by_customer_name():
    invoice = InvoiceCreate(
        customer_name="Ama Mensah",
        services=[{"description": "Full body spray", "price": "1200.00"}],
    )
    assert invoice.customer_id is None
    assert invoice.services[0].price == Decimal("1200.00")


def test_invoice_by_customer_id():
    customer_id = uuid4()
    invoice = InvoiceCreate(
        customer_id=customer_id,
        services=[{"description": "Body works", "price": 300}],
    )
    assert invoice.customer_id == customer_id


def test_invoice_requires_a_customer():
    with pytest.raises(ValidationError):
        InvoiceCreate(services=[{"description": "Body works", "price": 300}])
    with pytest.raises(ValidationError):
        InvoiceCreate(customer_name="   ", services=[{"description": "Body works", "price": 300}])


def test_invoice_requires_services():
    with pytest.raises(ValidationError):
        InvoiceCreate(customer_name="Ama", services=[])


@pytest.mark.parametrize("price", ["-1", "10.001"])
def test_line_item_price_must_be_money(price):
    with pytest.raises(ValidationError):
        InvoiceCreate(customer_name="Ama", services=[{"description": "Touch up respray", "price": price}])


def test_payment_amount_is_not_validated_by_the_schema():
    # Non-numeric input is left for the ledger to reject with INVALID_AMOUNT
    assert PaymentCreate(amount="abc").amount == "abc"
    assert PaymentCreate(amount="60").date is None


def test_inventory_quantities_not_negative():
    with pytest.raises(ValidationError):
        InventoryItemCreate(name="Primer", quantity=-1, unit="L", category="Paint", threshold=2)
    assert InventoryItemUpdate(quantity=4).model_dump(exclude_unset=True) == {"quantity": 4}


def test_signup_password_length():
    with pytest.raises(ValidationError):
        SignupRequest(email="staff@shop.example.com", password="short")


@pytest.mark.parametrize("field", ["name", "quantity", "unit", "category", "threshold"])
def test_inventory_update_rejects_explicit_null(field):
    with pytest.raises(ValidationError):
        InventoryItemUpdate.model_validate({field: None})


def test_inventory_update_omitted_fields_stay_unset():
    assert InventoryItemUpdate.model_validate({}).model_dump(exclude_unset=True) == {}


def test_customer_update_null_name_rejected_but_contact_clearable():
    with pytest.raises(ValidationError):
        CustomerUpdate.model_validate({"name": None})
    update = CustomerUpdate.model_validate({"email": None, "phone": None})
    assert update.model_dump(exclude_unset=True) == {"email": None, "phone": None}
