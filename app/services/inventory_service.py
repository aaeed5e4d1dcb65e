# app/services/inventory_service.py
"""
Listing and CRUD use-cases for the vehicles router.
Filters are normalised and composed here; vehicle_service executes them.
"""

from typing import Mapping, Optional

from sqlalchemy.orm import Session

from app.exceptions import PermissionDeniedError, ValidationError
from app.models.vehicle import ApprovalStatus, Vehicle
from app.schemas.actor import Actor
from app.schemas.vehicle import FilterSpec, GenerationRequest, VehicleCreate, VehicleUpdate, Visibility
from app.services import vehicle_service
from app.services.audit_service import list_history, record_audit
from app.services.filter_normalizer import normalize_filters
from app.services.generation_strategy import ContentGenerator
from app.services.query_composer import compose
from app.utils.logger import get_logger

logger = get_logger(__name__)


def require_admin(actor: Actor, what: str):
    if not actor.is_admin:
        raise PermissionDeniedError(f"Only admins can {what}")


def list_vehicles(db: Session, spec: FilterSpec) -> tuple[list[Vehicle], int]:
    return vehicle_service.find_vehicles(db, compose(spec))


def list_public(db: Session, raw_filters: Mapping[str, Optional[str]]) -> tuple[FilterSpec, list[Vehicle], int]:
    spec = normalize_filters(raw_filters)
    rows, total = list_vehicles(db, spec)
    return spec, rows, total


def list_mine(db: Session, raw_filters: Mapping[str, Optional[str]], actor: Actor):
    """The actor's own vehicles in every approval state unless one is asked for."""
    spec = normalize_filters(raw_filters, created_by=actor.id, visibility=Visibility.ALL)
    rows, total = list_vehicles(db, spec)
    return spec, rows, total


def list_pending(db: Session, raw_filters: Mapping[str, Optional[str]], actor: Actor):
    """Admin review queue: any listing filter applies, approval status is always pending."""
    require_admin(actor, "review pending vehicles")
    spec = normalize_filters(raw_filters).model_copy(update={"approval_status": ApprovalStatus.PENDING})
    rows, total = list_vehicles(db, spec)
    return spec, rows, total


async def create_vehicle(db: Session, body: VehicleCreate, actor: Actor,
                         generator: ContentGenerator) -> Vehicle:
    """New listings start pending. A missing description is generated; that never blocks creation."""
    fields = body.model_dump()
    generation = None
    if not fields.get("description"):
        try:
            request = GenerationRequest.from_vehicle(body)
            generation = await generator.generate_description(request)
            fields["description"] = generation.text
        except ValidationError as e:
            logger.warning(f"Skipping automatic description for new {body.make} {body.model}: {e.detail}")

    vehicle = vehicle_service.add_vehicle(db, fields, created_by=actor.id)
    details = {"make": vehicle.make, "model": vehicle.model, "year": vehicle.fabricate_year}
    if generation is not None:
        details["description"] = generation.audit_details()
    await record_audit(db, "CREATE", vehicle.id, actor.id, details)
    db.refresh(vehicle)
    return vehicle


async def update_vehicle(db: Session, vehicle_id: str, body: VehicleUpdate, actor: Actor) -> Vehicle:
    require_admin(actor, "edit vehicles")
    vehicle = vehicle_service.get_vehicle_or_404(db, vehicle_id)
    changes = body.model_dump(exclude_unset=True)
    vehicle_service.apply_changes(db, vehicle, changes)
    await record_audit(db, "UPDATE", vehicle_id, actor.id,
                       {"changes": body.model_dump(mode="json", exclude_unset=True)})
    db.refresh(vehicle)
    return vehicle


async def delete_vehicle(db: Session, vehicle_id: str, actor: Actor):
    require_admin(actor, "delete vehicles")
    vehicle = vehicle_service.get_vehicle_or_404(db, vehicle_id)
    summary = {"make": vehicle.make, "model": vehicle.model, "year": vehicle.fabricate_year}
    vehicle_service.remove_vehicle(db, vehicle)
    # Audit rows outlive the vehicle
    await record_audit(db, "DELETE", vehicle_id, actor.id, summary)


def vehicle_history(db: Session, vehicle_id: str):
    return list_history(db, vehicle_id)
