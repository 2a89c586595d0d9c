"""
Base Database Model for the Visa Processing System
"""

from sqlalchemy import Column, DateTime, String, TypeDecorator, Uuid
from sqlalchemy.orm import declarative_base, declared_attr
from datetime import datetime, timezone
import uuid

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EnumValueType(TypeDecorator):
    """
    Stores enum values (not names) as plain strings so that every backend
    sees the same lowercase status vocabulary used on the wire
    """
    impl = String
    cache_ok = True

    def __init__(self, enum_class, length: int = 40, *args, **kwargs):
        self.enum_class = enum_class
        super().__init__(length, *args, **kwargs)

    def process_bind_param(self, value, dialect):
        """Convert Python enum to database value"""
        if value is None:
            return value
        if isinstance(value, self.enum_class):
            return value.value
        try:
            return self.enum_class(value).value
        except ValueError:
            raise ValueError(f"Invalid {self.enum_class.__name__} value: {value}")

    def process_result_value(self, value, dialect):
        """Convert database value back to Python enum"""
        if value is None:
            return value
        return self.enum_class(value)


class BaseModel(Base):
    """Base model with common fields for all visa processing tables"""
    __abstract__ = True

    @declared_attr
    def __tablename__(cls):
        """Generate table name from class name"""
        import re
        name = re.sub('(.)([A-Z][a-z]+)', r'\1_\2', cls.__name__)
        return re.sub('([a-z0-9])([A-Z])', r'\1_\2', name).lower() + "s"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, comment="Record creation timestamp")
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False, comment="Last update timestamp")

    def __repr__(self):
        return f"<{self.__class__.__name__}(id={self.id})>"
