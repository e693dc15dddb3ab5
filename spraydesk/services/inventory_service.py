"""Inventory Service - stock records and the inventory view"""

from typing import Any, Iterable, List, Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from spraydesk.core.exceptions import ResourceNotFound
from spraydesk.core.logging import get_logger
from spraydesk.models.enums import ChangeEventType, FeedTable, InventorySort
from spraydesk.models.inventory import InventoryItem
from spraydesk.schemas.inventory import InventoryItemCreate, InventoryItemUpdate
from spraydesk.services.change_feed import change_feed

logger = get_logger(__name__)

ALL_CATEGORIES = "All"


def _field(item: Any, name: str) -> Any:
    # Works for ORM rows and for mirrored dict rows alike
    return item[name] if isinstance(item, dict) else getattr(item, name)


def filter_inventory(
    items: Iterable[Any],
    search: str = "",
    category: str = ALL_CATEGORIES,
    sort_by: InventorySort = InventorySort.NAME,
) -> List[Any]:
    """
    Case-insensitive name search plus exact category match, then sort.

    ``name`` sorts alphabetically, ``stock`` puts the largest quantity first.
    """
    needle = (search or "").casefold()
    matched = [
        item for item in items
        if needle in _field(item, "name").casefold()
        and (category in (None, "", ALL_CATEGORIES) or _field(item, "category") == category)
    ]
    if sort_by == InventorySort.STOCK:
        matched.sort(key=lambda item: _field(item, "quantity"), reverse=True)
    else:
        matched.sort(key=lambda item: _field(item, "name").casefold())
    return matched


def list_categories(items: Iterable[Any]) -> List[str]:
    """``All`` followed by each distinct category in first-seen order."""
    seen = dict.fromkeys(_field(item, "category") for item in items)
    return [ALL_CATEGORIES, *seen]


def low_stock_items(items: Iterable[Any]) -> List[Any]:
    return [item for item in items if _field(item, "quantity") < _field(item, "threshold")]


class InventoryService:
    """Service layer for inventory items"""

    @staticmethod
    async def list_items(db: AsyncSession) -> List[InventoryItem]:
        result = await db.execute(select(InventoryItem).order_by(InventoryItem.name))
        return list(result.scalars().all())

    @staticmethod
    async def get_item(db: AsyncSession, item_id: UUID) -> InventoryItem:
        result = await db.execute(select(InventoryItem).where(InventoryItem.id == item_id))
        item = result.scalar_one_or_none()
        if not item:
            raise ResourceNotFound("Inventory item", item_id)
        return item

    @staticmethod
    async def create_item(db: AsyncSession, data: InventoryItemCreate) -> InventoryItem:
        item = InventoryItem(**data.model_dump())
        db.add(item)
        await db.commit()
        await db.refresh(item)
        change_feed.publish_row(FeedTable.INVENTORY, ChangeEventType.INSERT, item)
        return item

    @staticmethod
    async def update_item(
        db: AsyncSession,
        item_id: UUID,
        data: InventoryItemUpdate,
    ) -> InventoryItem:
        item = await InventoryService.get_item(db, item_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(item, key, value)
        await db.commit()
        await db.refresh(item)
        if item.is_low_stock:
            logger.info(
                f"{item.name} is low on stock: {item.quantity} {item.unit} remaining",
                extra={"table": FeedTable.INVENTORY.value},
            )
        change_feed.publish_row(FeedTable.INVENTORY, ChangeEventType.UPDATE, item)
        return item

    @staticmethod
    async def delete_item(db: AsyncSession, item_id: UUID) -> None:
        item = await InventoryService.get_item(db, item_id)
        await db.delete(item)
        await db.commit()
        change_feed.publish_row(FeedTable.INVENTORY, ChangeEventType.DELETE, {"id": item_id})

    @staticmethod
    async def browse(
        db: AsyncSession,
        search: str = "",
        category: Optional[str] = ALL_CATEGORIES,
        sort_by: InventorySort = InventorySort.NAME,
    ) -> List[InventoryItem]:
        items = await InventoryService.list_items(db)
        return filter_inventory(items, search, category or ALL_CATEGORIES, sort_by)
