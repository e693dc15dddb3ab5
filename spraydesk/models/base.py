"""Shared declarative base for every table"""

import uuid
from sqlalchemy import Column, DateTime
from sqlalchemy.dialects.postgresql import UUID

from spraydesk.database import Base
from spraydesk.utils.time import get_utc_now


class BaseModel(Base):
    """
    Base model class with common fields for all models.

    Provides:
    - UUID primary key
    - created_at / updated_at as naive UTC, matching the migration
    - to_row() for change feed payloads
    """
    __abstract__ = True

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    created_at = Column(DateTime, default=get_utc_now, nullable=False)
    updated_at = Column(DateTime, default=get_utc_now, onupdate=get_utc_now, nullable=False)

    def to_row(self) -> dict:
        """Plain column -> value mapping, as carried by change feed events"""
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}
