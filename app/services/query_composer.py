# app/services/query_composer.py
"""
Filter composition engine: FilterSpec → Predicate.

The Predicate is plain data (no SQLAlchemy objects) so the composition rules
can be tested without a database. vehicle_service.find_vehicles is the only
place that turns it into SQL.

Rules, applied in order:
  1. make / model / color       → case-insensitive substring match
  2. year / price / km ranges   → >= and <= bounds, either end may be open
  3. status / approval_status   → exact match
  4. no approval_status given   → approval_status == approved (default visibility)
  5. search                     → OR-group over make, model, color substrings
  6. pagination                 → page clamped to >= 1, offset = (page - 1) * page_size
Everything is ANDed except the members of the search OR-group.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple, Union

from app.models.vehicle import ApprovalStatus
from app.schemas.vehicle import FilterSpec, Visibility


class Op(str, Enum):
    CONTAINS = "contains"
    EQ = "eq"
    GTE = "gte"
    LTE = "lte"


@dataclass(frozen=True)
class Condition:
    field: str        # Vehicle column name
    op: Op
    value: Any


@dataclass(frozen=True)
class AnyOf:
    conditions: Tuple[Condition, ...]


Clause = Union[Condition, AnyOf]


@dataclass(frozen=True)
class Predicate:
    clauses: Tuple[Clause, ...]
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


SUBSTRING_FIELDS = ("make", "model", "color")
SEARCH_FIELDS = ("make", "model", "color")

# FilterSpec (min, max) attribute pairs → Vehicle column
RANGE_FIELDS = (
    ("min_year", "max_year", "fabricate_year"),
    ("min_price", "max_price", "price"),
    ("min_km", "max_km", "km"),
)


def default_visibility(spec: FilterSpec) -> Optional[Condition]:
    """
    The approved-only rule. Returns the condition to inject, or None when the
    caller already chose an approval scope (an explicit status, or Visibility.ALL).
    """
    if spec.approval_status is not None or spec.visibility == Visibility.ALL:
        return None
    return Condition("approval_status", Op.EQ, ApprovalStatus.APPROVED)


def compose(spec: FilterSpec) -> Predicate:
    clauses = []

    for field in SUBSTRING_FIELDS:
        value = getattr(spec, field)
        if value is not None:
            clauses.append(Condition(field, Op.CONTAINS, value))

    for low_attr, high_attr, column in RANGE_FIELDS:
        low, high = getattr(spec, low_attr), getattr(spec, high_attr)
        if low is not None:
            clauses.append(Condition(column, Op.GTE, low))
        if high is not None:
            clauses.append(Condition(column, Op.LTE, high))

    if spec.status is not None:
        clauses.append(Condition("status", Op.EQ, spec.status))
    if spec.approval_status is not None:
        clauses.append(Condition("approval_status", Op.EQ, spec.approval_status))
    if spec.created_by is not None:
        clauses.append(Condition("created_by", Op.EQ, spec.created_by))

    visibility = default_visibility(spec)
    if visibility is not None:
        clauses.append(visibility)

    if spec.search is not None:
        clauses.append(AnyOf(tuple(Condition(f, Op.CONTAINS, spec.search) for f in SEARCH_FIELDS)))

    return Predicate(clauses=tuple(clauses), page=max(spec.page, 1), page_size=spec.page_size)
