"""Dashboard endpoint"""

from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from spraydesk.api import deps
from spraydesk.models.user import User
from spraydesk.schemas.responses import SuccessResponse
from spraydesk.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("", response_model=SuccessResponse)
async def get_dashboard(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Customers, inventory, invoices and low stock alerts in one call."""
    return SuccessResponse(data=await DashboardService.load(db))
