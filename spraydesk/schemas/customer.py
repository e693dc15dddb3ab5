from typing import Optional
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from uuid import UUID
from datetime import date
from decimal import Decimal


class CustomerBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v):
        # email and phone may be cleared with null; name may not
        if v is None:
            raise ValueError("name must not be null")
        return v


class CustomerResponse(CustomerBase):
    id: UUID
    total_spent: Decimal
    last_visit: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)
