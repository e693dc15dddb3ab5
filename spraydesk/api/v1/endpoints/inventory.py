"""Inventory endpoints - stock CRUD, filtered view and low stock alerts"""

from typing import Any
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from spraydesk.api import deps
from spraydesk.models.enums import InventorySort
from spraydesk.models.user import User
from spraydesk.schemas.inventory import (
    InventoryItemCreate,
    InventoryItemUpdate,
    InventoryItemResponse,
    LowStockAlert,
)
from spraydesk.schemas.responses import SuccessResponse
from spraydesk.services.inventory_service import (
    ALL_CATEGORIES,
    InventoryService,
    list_categories,
    low_stock_items,
)

router = APIRouter()


@router.get("", response_model=SuccessResponse)
async def list_inventory(
    search: str = Query("", description="Case-insensitive match on item name"),
    category: str = Query(ALL_CATEGORIES),
    sort_by: InventorySort = Query(InventorySort.NAME),
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    items = await InventoryService.browse(db, search, category, sort_by)
    return SuccessResponse(data=[InventoryItemResponse.model_validate(i) for i in items])


@router.get("/categories", response_model=SuccessResponse)
async def get_categories(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    items = await InventoryService.list_items(db)
    return SuccessResponse(data=list_categories(items))


@router.get("/low-stock", response_model=SuccessResponse)
async def get_low_stock(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Items whose quantity has fallen below their threshold."""
    items = await InventoryService.list_items(db)
    return SuccessResponse(data=[LowStockAlert.model_validate(i) for i in low_stock_items(items)])


@router.post("", response_model=SuccessResponse)
async def create_item(
    item_in: InventoryItemCreate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    item = await InventoryService.create_item(db, item_in)
    return SuccessResponse(
        data=InventoryItemResponse.model_validate(item),
        message="Inventory item added successfully",
    )


@router.put("/{item_id}", response_model=SuccessResponse)
async def update_item(
    item_id: UUID,
    item_in: InventoryItemUpdate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    item = await InventoryService.update_item(db, item_id, item_in)
    return SuccessResponse(
        data=InventoryItemResponse.model_validate(item),
        message="Inventory item updated successfully",
    )


@router.delete("/{item_id}", response_model=SuccessResponse)
async def delete_item(
    item_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    await InventoryService.delete_item(db, item_id)
    return SuccessResponse(message="Inventory item deleted successfully")
