from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator
from uuid import UUID


class InventoryItemBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(..., ge=0)
    unit: str = Field(..., min_length=1, max_length=50)
    category: str = Field(..., min_length=1, max_length=100)
    threshold: int = Field(..., ge=0, description="Low stock alert fires below this quantity")


class InventoryItemCreate(InventoryItemBase):
    pass


class InventoryItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    quantity: Optional[int] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1, max_length=50)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    threshold: Optional[int] = Field(None, ge=0)

    @field_validator("name", "quantity", "unit", "category", "threshold")
    @classmethod
    def reject_null(cls, v):
        # Omit a field to leave it unchanged; every inventory column is NOT NULL
        if v is None:
            raise ValueError("must not be null")
        return v


class InventoryItemResponse(InventoryItemBase):
    id: UUID
    is_low_stock: bool = False

    model_config = ConfigDict(from_attributes=True)


class LowStockAlert(BaseModel):
    id: UUID
    name: str
    quantity: int
    unit: str
    threshold: int

    model_config = ConfigDict(from_attributes=True)
