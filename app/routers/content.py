# app/routers/content.py
"""
Description generation and vehicle comparison.
These endpoints succeed even when the provider is down; `fallback_used`
tells the UI whether the text came from the provider or the built-in templates.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import enforce_preview_rate_limit, get_content_generator, get_current_actor
from app.schemas.actor import Actor
from app.schemas.vehicle import (
    CompareRequest,
    ComparisonHighlightsOut,
    ComparisonOut,
    DescriptionOut,
    GenerationRequest,
    VehicleDescriptionOut,
    VehicleOut,
)
from app.services import content_service
from app.services.generation_strategy import ContentGenerator

router = APIRouter()


@router.post("/vehicles/generate-description-preview", response_model=DescriptionOut,
             summary="Draft a description before the vehicle is saved")
async def preview_description(
    body: GenerationRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(enforce_preview_rate_limit),
    generator: ContentGenerator = Depends(get_content_generator),
):
    outcome = await content_service.preview_description(db, body, actor, generator)
    return DescriptionOut(description=outcome.text, fallback_used=outcome.used_fallback)


@router.post("/vehicles/{vehicle_id}/generate-description", response_model=VehicleDescriptionOut,
             summary="Generate and store a vehicle description (admin)")
async def generate_description(
    vehicle_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    generator: ContentGenerator = Depends(get_content_generator),
):
    outcome, vehicle = await content_service.generate_for_vehicle(db, vehicle_id, actor, generator)
    return VehicleDescriptionOut(
        description=outcome.text,
        vehicle=VehicleOut.model_validate(vehicle),
        fallback_used=outcome.used_fallback,
    )


@router.post("/vehicles/compare", response_model=ComparisonOut, summary="Compare two or more vehicles")
async def compare_vehicles(
    body: CompareRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    generator: ContentGenerator = Depends(get_content_generator),
):
    result = await content_service.compare_vehicles(db, body.vehicle_ids, actor, generator)
    return ComparisonOut(
        vehicles=[VehicleOut.model_validate(v) for v in result.vehicles],
        comparison_summary=result.summary,
        fallback_used=result.used_fallback,
        highlights=ComparisonHighlightsOut(
            best_value_id=result.highlights.best_value.id,
            lowest_mileage_id=result.highlights.lowest_mileage.id,
            newest_id=result.highlights.newest.id,
        ),
    )
