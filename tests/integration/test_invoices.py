"""Integration tests: invoices and payments against a real database."""

import asyncio
from decimal import Decimal
from uuid import UUID

import pytest
from httpx import AsyncClient

from tests.conftest import requires_db
from spraydesk.core.exceptions import ExceedsRemainingBalance
from spraydesk.database import AsyncSessionLocal
from spraydesk.schemas.invoice import PaymentCreate
from spraydesk.services.invoice_service import InvoiceService

pytestmark = requires_db


async def create_invoice(client: AsyncClient, api_base: str, headers: dict, name: str, *prices: str) -> dict:
    resp = await client.post(
        f"{api_base}/invoices",
        headers=headers,
        json={
            "customer_name": name,
            "services": [
                {"description": f"Service {n}", "price": price} for n, price in enumerate(prices)
            ],
        },
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


@pytest.mark.asyncio
async def test_partial_then_full_payment(async_client: AsyncClient, api_base: str, signed_in, unique_suffix):
    headers = signed_in["headers"]
    invoice = await create_invoice(
        async_client, api_base, headers, f"Kwame {unique_suffix}", "100.00", "50.00"
    )
    assert Decimal(invoice["total"]) == Decimal("150.00")
    assert invoice["status"] == "Pending"

    resp = await async_client.post(
        f"{api_base}/invoices/{invoice['id']}/payments", headers=headers, json={"amount": "60"}
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["data"]["status"] == "Partially Paid"

    resp = await async_client.post(
        f"{api_base}/invoices/{invoice['id']}/payments", headers=headers, json={"amount": "90"}
    )
    assert resp.json()["data"]["status"] == "Paid"
    assert Decimal(resp.json()["data"]["remaining"]) == Decimal("0.00")

    resp = await async_client.get(f"{api_base}/invoices/{invoice['id']}/receipt", headers=headers)
    receipt = resp.json()["data"]
    # Newest payment first
    assert [Decimal(p["amount"]) for p in receipt["payments"]] == [Decimal("90.00"), Decimal("60.00")]
    assert receipt["customer_name"] == f"Kwame {unique_suffix}"

    resp = await async_client.get(f"{api_base}/invoices/{invoice['id']}/reconciliation", headers=headers)
    assert resp.json()["data"]["is_consistent"] is True


@pytest.mark.asyncio
async def test_rejected_payments_leave_invoice_unchanged(
    async_client: AsyncClient, api_base: str, signed_in, unique_suffix
):
    headers = signed_in["headers"]
    invoice = await create_invoice(async_client, api_base, headers, f"Efua {unique_suffix}", "100.00")
    url = f"{api_base}/invoices/{invoice['id']}/payments"

    await async_client.post(url, headers=headers, json={"amount": "20"})

    resp = await async_client.post(url, headers=headers, json={"amount": "85"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "EXCEEDS_REMAINING_BALANCE"

    resp = await async_client.post(url, headers=headers, json={"amount": "abc"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "INVALID_AMOUNT"

    resp = await async_client.get(f"{api_base}/invoices/{invoice['id']}", headers=headers)
    data = resp.json()["data"]
    assert Decimal(data["paid_amount"]) == Decimal("20.00")
    assert data["status"] == "Partially Paid"

    resp = await async_client.get(url, headers=headers)
    assert len(resp.json()["data"]) == 1


@pytest.mark.asyncio
async def test_concurrent_payments_cannot_overdraw(
    async_client: AsyncClient, api_base: str, signed_in, unique_suffix
):
    headers = signed_in["headers"]
    invoice = await create_invoice(async_client, api_base, headers, f"Yaw {unique_suffix}", "100.00")

    async def pay() -> object:
        async with AsyncSessionLocal() as db:
            return await InvoiceService.record_payment(db, UUID(invoice["id"]), PaymentCreate(amount="70"))

    results = await asyncio.gather(pay(), pay(), return_exceptions=True)

    accepted = [r for r in results if not isinstance(r, BaseException)]
    rejected = [r for r in results if isinstance(r, BaseException)]
    assert len(accepted) == 1
    assert len(rejected) == 1
    assert isinstance(rejected[0], ExceedsRemainingBalance)
    assert rejected[0].remaining == Decimal("30.00")

    resp = await async_client.get(f"{api_base}/invoices/{invoice['id']}/reconciliation", headers=headers)
    data = resp.json()["data"]
    assert Decimal(data["paid_amount"]) == Decimal("70.00")
    assert data["payment_count"] == 1
    assert data["is_consistent"] is True


@pytest.mark.asyncio
async def test_invoice_for_known_customer_name_reuses_customer(
    async_client: AsyncClient, api_base: str, signed_in, unique_suffix
):
    headers = signed_in["headers"]
    name = f"Abena {unique_suffix}"
    first = await create_invoice(async_client, api_base, headers, name, "40.00")
    second = await create_invoice(async_client, api_base, headers, name, "60.00")
    assert first["customer_id"] == second["customer_id"]

    resp = await async_client.get(f"{api_base}/customers/{first['customer_id']}", headers=headers)
    assert resp.json()["data"]["name"] == name


@pytest.mark.asyncio
async def test_inventory_view_and_low_stock(async_client: AsyncClient, api_base: str, signed_in, unique_suffix):
    headers = signed_in["headers"]
    category = f"Paint-{unique_suffix}"
    for name, quantity in (("Red Base", 12), ("Clear Coat", 1)):
        resp = await async_client.post(
            f"{api_base}/inventory",
            headers=headers,
            json={"name": f"{name} {unique_suffix}", "quantity": quantity, "unit": "L",
                  "category": category, "threshold": 3},
        )
        assert resp.status_code == 200, resp.text

    resp = await async_client.get(
        f"{api_base}/inventory",
        headers=headers,
        params={"category": category, "sort_by": "stock"},
    )
    assert [i["quantity"] for i in resp.json()["data"]] == [12, 1]

    resp = await async_client.get(f"{api_base}/inventory/low-stock", headers=headers)
    low = [i["name"] for i in resp.json()["data"]]
    assert f"Clear Coat {unique_suffix}" in low
    assert f"Red Base {unique_suffix}" not in low

    resp = await async_client.get(f"{api_base}/inventory/categories", headers=headers)
    assert resp.json()["data"][0] == "All"
    assert category in resp.json()["data"]
