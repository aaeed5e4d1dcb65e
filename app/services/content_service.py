# app/services/content_service.py
"""
Generation use-cases: description preview, description for a stored vehicle,
and multi-vehicle comparison. Each call appends one audit row saying whether
provider text or fallback text was returned.
"""

from sqlalchemy.orm import Session

from app.exceptions import ValidationError
from app.models.vehicle import Vehicle
from app.schemas.actor import Actor
from app.schemas.vehicle import GenerationRequest
from app.services import comparison_engine, vehicle_service
from app.services.audit_service import record_audit
from app.services.comparison_engine import ComparisonResult
from app.services.generation_strategy import ContentGenerator, GenerationOutcome
from app.services.inventory_service import require_admin
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def preview_description(db: Session, request: GenerationRequest, actor: Actor,
                              generator: ContentGenerator) -> GenerationOutcome:
    outcome = await generator.generate_description(request)
    await record_audit(db, "PREVIEW_DESCRIPTION", None, actor.id,
                       {"make": request.make, "model": request.model, **outcome.audit_details()})
    return outcome


async def generate_for_vehicle(db: Session, vehicle_id: str, actor: Actor,
                               generator: ContentGenerator) -> tuple[GenerationOutcome, Vehicle]:
    """Generate and store a description for an existing vehicle (admin only)."""
    require_admin(actor, "generate vehicle descriptions")
    vehicle = vehicle_service.get_vehicle_or_404(db, vehicle_id)

    outcome = await generator.generate_description(GenerationRequest.from_vehicle(vehicle))
    vehicle_service.apply_changes(db, vehicle, {"description": outcome.text})
    await record_audit(db, "GENERATE_DESCRIPTION", vehicle_id, actor.id,
                       {"make": vehicle.make, "model": vehicle.model, **outcome.audit_details()})
    db.refresh(vehicle)
    return outcome, vehicle


async def compare_vehicles(db: Session, vehicle_ids: list[str], actor: Actor,
                           generator: ContentGenerator) -> ComparisonResult:
    if len(set(vehicle_ids)) < 2:
        raise ValidationError("Select at least two vehicles to compare")

    vehicles = vehicle_service.get_vehicles(db, vehicle_ids)
    if len(vehicles) < 2:
        logger.info(f"Comparison aborted: only {len(vehicles)} of {len(vehicle_ids)} ids resolved")
        raise ValidationError("At least two of the selected vehicles must exist")

    result = await comparison_engine.compare(vehicles, generator)
    await record_audit(db, "COMPARE_VEHICLES", None, actor.id,
                       {"vehicle_ids": [v.id for v in vehicles], **result.generation.audit_details()})
    return result
