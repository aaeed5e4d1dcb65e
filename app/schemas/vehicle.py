# app/schemas/vehicle.py
import re
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.models.vehicle import ApprovalStatus, FuelType, TransmissionType, VehicleStatus

PLATE_RE = re.compile(r"^[A-Z]{3}-?\d[A-Z0-9]\d{2}$")   # ABC-1234 or Mercosul ABC1D23


def _normalize_plate(value):
    if value is None or value == "":
        return None
    value = value.strip().upper()
    if not PLATE_RE.match(value):
        raise ValueError("license plate must look like ABC-1234 or ABC1D23")
    return value


class VehicleCreate(BaseModel):
    make: str = Field(min_length=1, max_length=100)
    model: str = Field(min_length=1, max_length=100)
    fabricate_year: int = Field(ge=1950)
    model_year: int = Field(ge=1950)
    color: str = Field(min_length=1, max_length=50)
    km: int = Field(ge=0)
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    transmission_type: TransmissionType = TransmissionType.MANUAL
    fuel_type: FuelType = FuelType.FLEX
    license_plate: Optional[str] = None
    status: VehicleStatus = VehicleStatus.AVAILABLE
    description: Optional[str] = None
    image_urls: list[str] = []

    @field_validator("license_plate")
    @classmethod
    def check_plate(cls, value):
        return _normalize_plate(value)


class VehicleUpdate(BaseModel):
    """Partial update. Approval fields are deliberately absent: only the approval workflow moves them."""
    make: Optional[str] = Field(default=None, min_length=1, max_length=100)
    model: Optional[str] = Field(default=None, min_length=1, max_length=100)
    fabricate_year: Optional[int] = Field(default=None, ge=1950)
    model_year: Optional[int] = Field(default=None, ge=1950)
    color: Optional[str] = Field(default=None, min_length=1, max_length=50)
    km: Optional[int] = Field(default=None, ge=0)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    transmission_type: Optional[TransmissionType] = None
    fuel_type: Optional[FuelType] = None
    license_plate: Optional[str] = None
    status: Optional[VehicleStatus] = None
    description: Optional[str] = None
    image_urls: Optional[list[str]] = None

    @field_validator("license_plate")
    @classmethod
    def check_plate(cls, value):
        return _normalize_plate(value)

    class Config:
        extra = "forbid"


class VehicleOut(BaseModel):
    id: str
    make: str
    model: str
    fabricate_year: int
    model_year: int
    color: str
    km: int
    price: str
    transmission_type: TransmissionType
    fuel_type: FuelType
    license_plate: Optional[str]
    status: VehicleStatus
    approval_status: ApprovalStatus
    description: Optional[str]
    image_urls: list[str] = []
    created_by: Optional[str]
    approved_by: Optional[str]
    approved_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    @field_validator("price", mode="before")
    @classmethod
    def price_as_string(cls, value):
        # Decimal-as-string keeps "60000.00" exact on the wire
        return str(Decimal(str(value)).quantize(Decimal("0.01")))

    @field_validator("image_urls", mode="before")
    @classmethod
    def empty_images(cls, value):
        return value or []

    class Config:
        from_attributes = True


class VehicleListOut(BaseModel):
    vehicles: list[VehicleOut]
    total: int
    page: int
    page_size: int


class MakeCount(BaseModel):
    make: str
    count: int


# ── Filtering ────────────────────────────────────────────────────────────────

class Visibility(str, Enum):
    APPROVED_ONLY = "approved_only"   # public listing scope
    ALL = "all"                       # explicit override, e.g. an owner's own vehicles


class FilterSpec(BaseModel):
    """
    Sparse, immutable set of listing constraints. None means "no constraint".
    Built per request by filter_normalizer.normalize_filters and turned into a
    Predicate by query_composer.compose.
    """
    make: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    status: Optional[VehicleStatus] = None
    approval_status: Optional[ApprovalStatus] = None
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    min_km: Optional[int] = None
    max_km: Optional[int] = None
    search: Optional[str] = None
    created_by: Optional[str] = None
    visibility: Visibility = Visibility.APPROVED_ONLY
    page: int = 1
    page_size: int = 10

    class Config:
        frozen = True


# ── Content generation ───────────────────────────────────────────────────────

_MAKE_RE = re.compile(r"^[a-zA-ZÀ-ÿ\s\-]+$")
_MODEL_RE = re.compile(r"^[a-zA-ZÀ-ÿ0-9\s\-\.]+$")
_COLOR_RE = _MAKE_RE
_PRICE_RE = re.compile(r"^\d+(\.\d{1,2})?$")
MAX_PRICE = Decimal("10000000")


class GenerationRequest(BaseModel):
    """Minimal attribute subset needed to write a description."""
    make: str = Field(min_length=1, max_length=50)
    model: str = Field(min_length=1, max_length=50)
    fabricate_year: int = Field(ge=1950)
    model_year: int = Field(ge=1950)
    color: str = Field(min_length=1, max_length=30)
    km: int = Field(ge=0, le=1_000_000)
    price: str = Field(min_length=1)

    @field_validator("make", "model", "color", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("make")
    @classmethod
    def check_make(cls, value):
        if not _MAKE_RE.match(value):
            raise ValueError("make may only contain letters, spaces and hyphens")
        return value

    @field_validator("model")
    @classmethod
    def check_model(cls, value):
        if not _MODEL_RE.match(value):
            raise ValueError("model may only contain letters, digits, spaces, hyphens and dots")
        return value

    @field_validator("color")
    @classmethod
    def check_color(cls, value):
        if not _COLOR_RE.match(value):
            raise ValueError("color may only contain letters, spaces and hyphens")
        return value

    @field_validator("fabricate_year")
    @classmethod
    def check_fabricate_year(cls, value):
        if value > date.today().year:
            raise ValueError("fabricate_year cannot be in the future")
        return value

    @field_validator("model_year")
    @classmethod
    def check_model_year(cls, value):
        if value > date.today().year + 1:
            raise ValueError("model_year cannot be more than one year ahead")
        return value

    @field_validator("price", mode="before")
    @classmethod
    def check_price(cls, value):
        if isinstance(value, (int, Decimal)):
            value = str(value)
        if not isinstance(value, str) or not _PRICE_RE.match(value.strip()):
            raise ValueError("price must be a number with at most two decimal places")
        value = value.strip()
        if Decimal(value) > MAX_PRICE:
            raise ValueError("price must be at most 10,000,000")
        return value

    @classmethod
    def from_vehicle(cls, vehicle) -> "GenerationRequest":
        """Build from a stored vehicle; stored rows skip form validation, the generator still sanitizes."""
        return cls.model_construct(
            make=vehicle.make,
            model=vehicle.model,
            fabricate_year=vehicle.fabricate_year,
            model_year=vehicle.model_year,
            color=vehicle.color,
            km=vehicle.km,
            price=str(Decimal(str(vehicle.price)).quantize(Decimal("0.01"))),
        )


class DescriptionOut(BaseModel):
    description: str
    fallback_used: bool


class VehicleDescriptionOut(BaseModel):
    description: str
    vehicle: VehicleOut
    fallback_used: bool


class CompareRequest(BaseModel):
    vehicle_ids: list[str]


class ComparisonHighlightsOut(BaseModel):
    best_value_id: str
    lowest_mileage_id: str
    newest_id: str


class ComparisonOut(BaseModel):
    vehicles: list[VehicleOut]
    comparison_summary: str
    fallback_used: bool
    highlights: ComparisonHighlightsOut
