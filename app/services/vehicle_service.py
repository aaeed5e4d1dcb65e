# app/services/vehicle_service.py
"""
Vehicle persistence helpers. This is the only module that builds vehicle SQL.
Used by inventory_service, approval_service and content_service.
Database failures surface as PersistenceError; nothing here retries.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import and_, func, or_, true
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError, PersistenceError
from app.models.vehicle import ApprovalStatus, Vehicle
from app.services.query_composer import AnyOf, Op, Predicate
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _to_sql(clause):
    if isinstance(clause, AnyOf):
        return or_(*(_to_sql(c) for c in clause.conditions))

    column = getattr(Vehicle, clause.field)
    if clause.op == Op.CONTAINS:
        return column.ilike(f"%{_escape_like(str(clause.value))}%", escape="\\")
    if clause.op == Op.EQ:
        return column == clause.value
    if clause.op == Op.GTE:
        return column >= clause.value
    if clause.op == Op.LTE:
        return column <= clause.value
    raise ValueError(f"Unsupported operator {clause.op!r}")


def predicate_to_sql(predicate: Predicate):
    """AND of all predicate clauses as a single SQLAlchemy expression."""
    if not predicate.clauses:
        return true()
    return and_(*(_to_sql(c) for c in predicate.clauses))


def find_vehicles(db: Session, predicate: Predicate) -> tuple[list[Vehicle], int]:
    """Execute a composed predicate. Returns one page of rows (newest first) and the total match count."""
    try:
        q = db.query(Vehicle).filter(predicate_to_sql(predicate))
        total = q.count()
        rows = (
            q.order_by(Vehicle.created_at.desc(), Vehicle.id)
            .offset(predicate.offset)
            .limit(predicate.limit)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Vehicle query failed: {e}")
        raise PersistenceError("Failed to query vehicles") from e
    return rows, total


def get_vehicle(db: Session, vehicle_id: str) -> Optional[Vehicle]:
    """Find a vehicle by id. Returns None if not found."""
    try:
        return db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
    except SQLAlchemyError as e:
        raise PersistenceError("Failed to load vehicle") from e


def get_vehicle_or_404(db: Session, vehicle_id: str) -> Vehicle:
    vehicle = get_vehicle(db, vehicle_id)
    if vehicle is None:
        raise NotFoundError(f"Vehicle {vehicle_id} not found")
    return vehicle


def get_vehicles(db: Session, vehicle_ids: list[str]) -> list[Vehicle]:
    """Load vehicles in the order given, skipping unknown and repeated ids."""
    found = []
    seen = set()
    for vehicle_id in vehicle_ids:
        if vehicle_id in seen:
            continue
        seen.add(vehicle_id)
        vehicle = get_vehicle(db, vehicle_id)
        if vehicle is not None:
            found.append(vehicle)
    return found


def add_vehicle(db: Session, fields: dict, created_by: str) -> Vehicle:
    """Insert a new vehicle. New listings always start pending, whatever the caller sent."""
    now = datetime.utcnow()
    vehicle = Vehicle(
        **fields,
        created_by=created_by,
        approval_status=ApprovalStatus.PENDING,
        approved_by=None,
        approved_at=None,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(vehicle)
        db.flush()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Failed to create vehicle") from e
    return vehicle


def apply_changes(db: Session, vehicle: Vehicle, changes: dict) -> Vehicle:
    for key, value in changes.items():
        setattr(vehicle, key, value)
    vehicle.updated_at = datetime.utcnow()
    try:
        db.flush()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Failed to update vehicle") from e
    return vehicle


def remove_vehicle(db: Session, vehicle: Vehicle):
    try:
        db.delete(vehicle)
        db.flush()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Failed to delete vehicle") from e


def update_approval(db: Session, vehicle_id: str, expected: ApprovalStatus, target: ApprovalStatus,
                    approved_by: Optional[str], approved_at: Optional[datetime]) -> bool:
    """
    Conditional update: writes only if the row is still in `expected`.
    Returns False when another request moved the status first.
    """
    try:
        updated = (
            db.query(Vehicle)
            .filter(Vehicle.id == vehicle_id, Vehicle.approval_status == expected)
            .update(
                {
                    Vehicle.approval_status: target,
                    Vehicle.approved_by: approved_by,
                    Vehicle.approved_at: approved_at,
                    Vehicle.updated_at: datetime.utcnow(),
                },
                synchronize_session=False,
            )
        )
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Failed to update approval status") from e
    return updated == 1


def list_makes(db: Session) -> list[tuple[str, int]]:
    """Distinct makes among approved vehicles, most common first."""
    try:
        rows = (
            db.query(Vehicle.make, func.count(Vehicle.id))
            .filter(Vehicle.approval_status == ApprovalStatus.APPROVED)
            .group_by(Vehicle.make)
            .order_by(func.count(Vehicle.id).desc(), Vehicle.make)
            .all()
        )
    except SQLAlchemyError as e:
        raise PersistenceError("Failed to list makes") from e
    return [(make, count) for make, count in rows]
