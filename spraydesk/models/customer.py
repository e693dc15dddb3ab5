"""Customer records"""

from decimal import Decimal
from sqlalchemy import Column, String, Numeric, Date
from sqlalchemy.orm import relationship

from spraydesk.models.base import BaseModel


class Customer(BaseModel):
    __tablename__ = "customers"

    name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    total_spent = Column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    last_visit = Column(Date, nullable=True)

    invoices = relationship("Invoice", back_populates="customer")

    def __repr__(self) -> str:
        return f"<Customer {self.name}>"
