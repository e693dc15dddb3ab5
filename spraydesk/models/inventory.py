"""Inventory stock items (paints, consumables, parts)"""

from sqlalchemy import Column, String, Integer, CheckConstraint

from spraydesk.models.base import BaseModel


class InventoryItem(BaseModel):
    __tablename__ = "inventory"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
        CheckConstraint("threshold >= 0", name="ck_inventory_threshold_non_negative"),
    )

    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    unit = Column(String(50), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    # Low-stock alert fires when quantity drops below this
    threshold = Column(Integer, nullable=False, default=0)

    @property
    def is_low_stock(self) -> bool:
        return self.quantity < self.threshold

    def __repr__(self) -> str:
        return f"<InventoryItem {self.name} {self.quantity}{self.unit}>"
