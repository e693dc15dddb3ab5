"""API V1 Router"""

from fastapi import APIRouter

from spraydesk.api.v1.endpoints import (
    auth, customers, inventory, invoices, dashboard, realtime
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(customers.router, prefix="/customers", tags=["Customers"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["Inventory"])
api_router.include_router(invoices.router, prefix="/invoices", tags=["Invoices & Payments"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(realtime.router, prefix="/realtime", tags=["Realtime"])
