# app/services/filter_normalizer.py
"""
Turns raw listing query parameters into a typed FilterSpec.

Query strings arrive as text, often with empty values for untouched form
fields ("make=&color=Prata"). Blank values are treated as absent here so that
nothing downstream has to know about empty-string sentinels. Anything that is
present but unparseable is a ValidationError (HTTP 400).
"""

from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

from app.config import settings
from app.exceptions import ValidationError
from app.models.vehicle import ApprovalStatus, VehicleStatus
from app.schemas.vehicle import FilterSpec, Visibility

TEXT_FIELDS = ("make", "model", "color", "search")
INT_FIELDS = ("min_year", "max_year", "min_km", "max_km")
PRICE_FIELDS = ("min_price", "max_price")
MAX_TEXT_LENGTH = 100


def _present(raw: Mapping[str, Optional[str]], key: str) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_int(key: str, value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise ValidationError(f"Invalid value for '{key}': expected an integer, got '{value}'")
    if parsed < 0:
        raise ValidationError(f"Invalid value for '{key}': must not be negative")
    return parsed


def _parse_price(key: str, value: str) -> Decimal:
    try:
        parsed = Decimal(value)
    except InvalidOperation:
        raise ValidationError(f"Invalid value for '{key}': expected a number, got '{value}'")
    if not parsed.is_finite() or parsed < 0:
        raise ValidationError(f"Invalid value for '{key}': must be a non-negative number")
    return parsed


def _parse_enum(key: str, value: str, enum_cls):
    try:
        return enum_cls(value.lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid value for '{key}': expected one of {allowed}")


def normalize_filters(
    raw: Mapping[str, Optional[str]],
    *,
    created_by: Optional[str] = None,
    visibility: Visibility = Visibility.APPROVED_ONLY,
) -> FilterSpec:
    """
    Build a FilterSpec from raw query parameters.

    `created_by` and `visibility` are never read from the request: only the
    caller (e.g. the "my vehicles" endpoint) may widen the approval scope.
    `limit` is accepted as an alias of `page_size`.
    """
    values = {}

    for key in TEXT_FIELDS:
        value = _present(raw, key)
        if value is not None:
            values[key] = value[:MAX_TEXT_LENGTH]

    for key in INT_FIELDS:
        value = _present(raw, key)
        if value is not None:
            values[key] = _parse_int(key, value)

    for key in PRICE_FIELDS:
        value = _present(raw, key)
        if value is not None:
            values[key] = _parse_price(key, value)

    status = _present(raw, "status")
    if status is not None:
        values["status"] = _parse_enum("status", status, VehicleStatus)

    approval_status = _present(raw, "approval_status")
    if approval_status is not None:
        values["approval_status"] = _parse_enum("approval_status", approval_status, ApprovalStatus)

    page = _present(raw, "page")
    if page is not None:
        try:
            values["page"] = int(page)
        except ValueError:
            raise ValidationError(f"Invalid value for 'page': expected an integer, got '{page}'")

    page_size = _present(raw, "page_size") or _present(raw, "limit")
    if page_size is None:
        values["page_size"] = settings.DEFAULT_PAGE_SIZE
    else:
        try:
            size = int(page_size)
        except ValueError:
            raise ValidationError(f"Invalid value for 'page_size': expected an integer, got '{page_size}'")
        if size <= 0:
            raise ValidationError("Invalid value for 'page_size': must be greater than zero")
        values["page_size"] = min(size, settings.MAX_PAGE_SIZE)

    if created_by is not None:
        values["created_by"] = created_by

    return FilterSpec(visibility=visibility, **values)
