"""Models Package - Export all models for easy imports"""

from spraydesk.models.base import BaseModel
from spraydesk.models.enums import *
from spraydesk.models.user import User
from spraydesk.models.customer import Customer
from spraydesk.models.inventory import InventoryItem
from spraydesk.models.invoice import Invoice, ServiceLineItem, Payment


__all__ = [
    # Base classes
    "BaseModel",

    # Enums
    "InvoiceStatus",
    "InventorySort",
    "ChangeEventType",
    "FeedTable",

    # Session gate
    "User",

    # Records
    "Customer",
    "InventoryItem",

    # Billing
    "Invoice",
    "ServiceLineItem",
    "Payment",
]
