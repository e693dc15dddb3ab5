"""Dashboard Service - the single initial load behind the main screen"""

from typing import Any, Dict
from sqlalchemy.ext.asyncio import AsyncSession

from spraydesk.schemas.customer import CustomerResponse
from spraydesk.schemas.inventory import InventoryItemResponse, LowStockAlert
from spraydesk.services.customer_service import CustomerService
from spraydesk.services.inventory_service import InventoryService, list_categories, low_stock_items
from spraydesk.services.invoice_service import InvoiceService, invoice_summary


class DashboardService:
    @staticmethod
    async def load(db: AsyncSession) -> Dict[str, Any]:
        # One session cannot run queries concurrently, so these run in turn
        customers = await CustomerService.list_customers(db)
        inventory = await InventoryService.list_items(db)
        invoices = await InvoiceService.list_invoices(db)

        return {
            "customers": [CustomerResponse.model_validate(c) for c in customers],
            "inventory": [InventoryItemResponse.model_validate(i) for i in inventory],
            "invoices": [invoice_summary(inv) for inv in invoices],
            "categories": list_categories(inventory),
            "low_stock": [LowStockAlert.model_validate(i) for i in low_stock_items(inventory)],
        }
