"""Centralized Enum Definitions"""

import enum


class InvoiceStatus(str, enum.Enum):
    """Derived invoice payment status; ordered Pending -> Partially Paid -> Paid"""
    PENDING = "Pending"
    PARTIALLY_PAID = "Partially Paid"
    PAID = "Paid"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]


_STATUS_RANK = {
    InvoiceStatus.PENDING: 0,
    InvoiceStatus.PARTIALLY_PAID: 1,
    InvoiceStatus.PAID: 2,
}


class InventorySort(str, enum.Enum):
    """Inventory list orderings"""
    NAME = "name"
    STOCK = "stock"


class ChangeEventType(str, enum.Enum):
    """Row change kinds carried on the realtime feed"""
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class FeedTable(str, enum.Enum):
    """Tables that publish change events"""
    CUSTOMERS = "customers"
    INVENTORY = "inventory"
    INVOICES = "invoices"
    PAYMENTS = "payments"
