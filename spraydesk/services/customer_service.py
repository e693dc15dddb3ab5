"""Customer Service"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from spraydesk.core.exceptions import ResourceNotFound
from spraydesk.models.customer import Customer
from spraydesk.models.enums import ChangeEventType, FeedTable
from spraydesk.schemas.customer import CustomerCreate, CustomerUpdate
from spraydesk.services.change_feed import change_feed
from spraydesk.utils.time import get_utc_today


class CustomerService:
    @staticmethod
    async def list_customers(db: AsyncSession) -> List[Customer]:
        result = await db.execute(select(Customer).order_by(Customer.name))
        return list(result.scalars().all())

    @staticmethod
    async def get_customer(db: AsyncSession, customer_id: UUID) -> Customer:
        result = await db.execute(select(Customer).where(Customer.id == customer_id))
        customer = result.scalar_one_or_none()
        if not customer:
            raise ResourceNotFound("Customer", customer_id)
        return customer

    @staticmethod
    async def find_by_name(db: AsyncSession, name: str) -> Optional[Customer]:
        result = await db.execute(
            select(Customer).where(Customer.name == name).order_by(Customer.created_at).limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def create_customer(
        db: AsyncSession,
        data: CustomerCreate,
        auto_commit: bool = True,
    ) -> Customer:
        """
        Add a customer. With auto_commit=False the row is only flushed so the
        caller can fold it into a larger transaction (invoice creation).
        """
        customer = Customer(
            name=data.name.strip(),
            email=data.email,
            phone=data.phone,
            last_visit=get_utc_today(),
        )
        db.add(customer)
        if auto_commit:
            await db.commit()
            await db.refresh(customer)
            change_feed.publish_row(FeedTable.CUSTOMERS, ChangeEventType.INSERT, customer)
        else:
            await db.flush()
        return customer

    @staticmethod
    async def update_customer(
        db: AsyncSession,
        customer_id: UUID,
        data: CustomerUpdate,
    ) -> Customer:
        customer = await CustomerService.get_customer(db, customer_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(customer, key, value)
        await db.commit()
        await db.refresh(customer)
        change_feed.publish_row(FeedTable.CUSTOMERS, ChangeEventType.UPDATE, customer)
        return customer
