"""Integration tests: payment endpoint responses, with the database stubbed out."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from spraydesk.core.exceptions import (
    ExceedsRemainingBalance,
    InvalidAmount,
    PaymentConflict,
    ResourceNotFound,
)
from spraydesk.models.invoice import Payment
from spraydesk.services import ledger

RECORD_PAYMENT = "spraydesk.api.v1.endpoints.invoices.InvoiceService.record_payment"


@pytest.mark.asyncio
async def test_payment_recorded(async_client: AsyncClient, api_base: str, stub_session):
    invoice_id = uuid4()
    validated = ledger.validate_payment(
        ledger.InvoiceSnapshot(id=invoice_id, total=Decimal("150.00")), "60", date(2024, 3, 1)
    )
    payment = Payment(
        id=uuid4(), invoice_id=invoice_id, amount=validated.amount, date=validated.date, method="MoMo"
    )

    with patch(RECORD_PAYMENT, new_callable=AsyncMock) as mock_record:
        mock_record.return_value = (payment, validated)
        resp = await async_client.post(
            f"{api_base}/invoices/{invoice_id}/payments", json={"amount": "60", "method": "MoMo"}
        )

    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    assert Decimal(data["paid_amount"]) == Decimal("60.00")
    assert Decimal(data["remaining"]) == Decimal("90.00")
    assert data["status"] == "Partially Paid"
    assert data["payment"]["method"] == "MoMo"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, status_code, code",
    [
        (InvalidAmount("abc"), 400, "INVALID_AMOUNT"),
        (ExceedsRemainingBalance(Decimal("85.00"), Decimal("80.00")), 400, "EXCEEDS_REMAINING_BALANCE"),
        (PaymentConflict("inv"), 409, "PAYMENT_CONFLICT"),
        (ResourceNotFound("Invoice", "inv"), 404, "RESOURCE_NOT_FOUND"),
    ],
)
async def test_payment_errors_use_error_envelope(
    async_client: AsyncClient, api_base: str, stub_session, error, status_code, code
):
    with patch(RECORD_PAYMENT, new_callable=AsyncMock) as mock_record:
        mock_record.side_effect = error
        resp = await async_client.post(
            f"{api_base}/invoices/{uuid4()}/payments", json={"amount": "85"}
        )

    assert resp.status_code == status_code
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == code
    assert body["error"]["message"] == error.message


@pytest.mark.asyncio
async def test_exceeds_message_names_remaining_balance(async_client: AsyncClient, api_base: str, stub_session):
    with patch(RECORD_PAYMENT, new_callable=AsyncMock) as mock_record:
        mock_record.side_effect = ExceedsRemainingBalance(Decimal("85.00"), Decimal("80.00"))
        resp = await async_client.post(
            f"{api_base}/invoices/{uuid4()}/payments", json={"amount": "85"}
        )

    assert "80.00" in resp.json()["error"]["message"]


@pytest.mark.asyncio
async def test_unreachable_database_returns_503(async_client: AsyncClient, api_base: str, stub_session):
    with patch(
        "spraydesk.api.v1.endpoints.invoices.InvoiceService.list_invoices", new_callable=AsyncMock
    ) as mock_list:
        mock_list.side_effect = OperationalError("SELECT", {}, ConnectionRefusedError())
        resp = await async_client.get(f"{api_base}/invoices")

    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "PERSISTENCE_UNAVAILABLE"


@pytest.mark.asyncio
async def test_missing_amount_is_a_validation_error(async_client: AsyncClient, api_base: str, stub_session):
    resp = await async_client.post(f"{api_base}/invoices/{uuid4()}/payments", json={})
    assert resp.status_code == 422
