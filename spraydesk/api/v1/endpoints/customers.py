"""Customer endpoints"""

from typing import Any
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from spraydesk.api import deps
from spraydesk.models.user import User
from spraydesk.schemas.customer import CustomerCreate, CustomerUpdate, CustomerResponse
from spraydesk.schemas.responses import SuccessResponse
from spraydesk.services.customer_service import CustomerService

router = APIRouter()


@router.get("", response_model=SuccessResponse)
async def list_customers(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    customers = await CustomerService.list_customers(db)
    return SuccessResponse(data=[CustomerResponse.model_validate(c) for c in customers])


@router.post("", response_model=SuccessResponse)
async def create_customer(
    customer_in: CustomerCreate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    customer = await CustomerService.create_customer(db, customer_in)
    return SuccessResponse(
        data=CustomerResponse.model_validate(customer),
        message="Customer added successfully",
    )


@router.get("/{customer_id}", response_model=SuccessResponse)
async def get_customer(
    customer_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    customer = await CustomerService.get_customer(db, customer_id)
    return SuccessResponse(data=CustomerResponse.model_validate(customer))


@router.put("/{customer_id}", response_model=SuccessResponse)
async def update_customer(
    customer_id: UUID,
    customer_in: CustomerUpdate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    customer = await CustomerService.update_customer(db, customer_id, customer_in)
    return SuccessResponse(
        data=CustomerResponse.model_validate(customer),
        message="Customer updated successfully",
    )
