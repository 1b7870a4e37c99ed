import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, Float, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import CHAR, TypeDecorator

Base = declarative_base()


class GUID(TypeDecorator):
    """UUID column stored natively on PostgreSQL and as CHAR(36) elsewhere."""

    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(UUID(as_uuid=True))
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if not isinstance(value, uuid.UUID):
            value = uuid.UUID(str(value))
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(str(value))


class MeasurementUnit(str, enum.Enum):
    cm = "cm"
    inch = "in"


class MeasurementRecord(Base):
    __tablename__ = "measurement_records"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    recorded_at = Column(DateTime(timezone=True), nullable=False, index=True)
    neck = Column(Float, nullable=False)
    shoulders = Column(Float, nullable=False)
    chest = Column(Float, nullable=False)
    waist = Column(Float, nullable=False)
    hips = Column(Float, nullable=False)
    sleeve = Column(Float, nullable=False)
    inseam = Column(Float, nullable=False)
    height_estimate = Column(Float, nullable=False)
    unit = Column(Enum(MeasurementUnit, values_callable=lambda e: [m.value for m in e]), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
