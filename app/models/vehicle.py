# app/models/vehicle.py
"""
Vehicle inventory table.
Every listing starts `pending` and only becomes publicly visible once an admin
approves it. approved_by / approved_at are written together with approval_status
by approval_service and by nothing else.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text, Numeric, JSON, Enum
from app.database import Base


class TransmissionType(str, enum.Enum):
    MANUAL = "manual"
    AUTOMATIC = "automatic"
    CVT = "cvt"
    SEMI_AUTOMATIC = "semi_automatic"


class FuelType(str, enum.Enum):
    GASOLINE = "gasoline"
    ETHANOL = "ethanol"
    FLEX = "flex"
    DIESEL = "diesel"
    ELECTRIC = "electric"
    HYBRID = "hybrid"


class VehicleStatus(str, enum.Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Actor ids come from the caller (user ids, e-mails), not from this database
ACTOR_ID_LENGTH = 255


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    make = Column(String(100), nullable=False, index=True)
    model = Column(String(100), nullable=False)
    fabricate_year = Column(Integer, nullable=False)
    model_year = Column(Integer, nullable=False)
    color = Column(String(50), nullable=False)
    km = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    transmission_type = Column(
        Enum(TransmissionType, name="transmission_type", values_callable=_enum_values),
        nullable=False, default=TransmissionType.MANUAL,
    )
    fuel_type = Column(
        Enum(FuelType, name="fuel_type", values_callable=_enum_values),
        nullable=False, default=FuelType.FLEX,
    )
    license_plate = Column(String(10))
    status = Column(
        Enum(VehicleStatus, name="vehicle_status", values_callable=_enum_values),
        nullable=False, default=VehicleStatus.AVAILABLE, index=True,
    )
    approval_status = Column(
        Enum(ApprovalStatus, name="vehicle_approval_status", values_callable=_enum_values),
        nullable=False, default=ApprovalStatus.PENDING, index=True,
    )
    description = Column(Text)
    image_urls = Column(JSON, nullable=False, default=list)
    created_by = Column(String(ACTOR_ID_LENGTH), index=True)
    approved_by = Column(String(ACTOR_ID_LENGTH))
    approved_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return (f"<Vehicle {self.id} {self.make} {self.model} {self.model_year} "
                f"approval={self.approval_status}>")
