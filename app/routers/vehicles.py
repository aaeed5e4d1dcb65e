# app/routers/vehicles.py
"""
Vehicle inventory: filtered listing, CRUD and per-vehicle audit history.
Public listings only ever show approved vehicles unless approval_status is given.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_content_generator, get_current_actor
from app.schemas.actor import Actor
from app.schemas.audit_log import AuditLogOut
from app.schemas.vehicle import MakeCount, VehicleCreate, VehicleListOut, VehicleOut, VehicleUpdate
from app.services import inventory_service, vehicle_service
from app.services.generation_strategy import ContentGenerator

router = APIRouter()


def _page(spec, rows, total) -> VehicleListOut:
    return VehicleListOut(
        vehicles=[VehicleOut.model_validate(v) for v in rows],
        total=total,
        page=max(spec.page, 1),
        page_size=spec.page_size,
    )


@router.get("/vehicles", response_model=VehicleListOut, summary="List vehicles with filters")
def list_vehicles(request: Request, db: Session = Depends(get_db)):
    """
    Query parameters: make, model, color, search, status, approval_status,
    min_year, max_year, min_price, max_price, min_km, max_km, page, page_size (or limit).
    Blank values are ignored.
    """
    spec, rows, total = inventory_service.list_public(db, request.query_params)
    return _page(spec, rows, total)


@router.get("/vehicles/mine", response_model=VehicleListOut, summary="List the caller's own vehicles")
def list_my_vehicles(request: Request, db: Session = Depends(get_db),
                     actor: Actor = Depends(get_current_actor)):
    spec, rows, total = inventory_service.list_mine(db, request.query_params, actor)
    return _page(spec, rows, total)


@router.get("/vehicles/pending", response_model=VehicleListOut, summary="Vehicles awaiting approval (admin)")
def list_pending_vehicles(request: Request, db: Session = Depends(get_db),
                          actor: Actor = Depends(get_current_actor)):
    spec, rows, total = inventory_service.list_pending(db, request.query_params, actor)
    return _page(spec, rows, total)


@router.get("/vehicles/makes", response_model=list[MakeCount], summary="Makes of approved vehicles")
def list_makes(db: Session = Depends(get_db)):
    return [MakeCount(make=make, count=count) for make, count in vehicle_service.list_makes(db)]


@router.get("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Get one vehicle")
def get_vehicle(vehicle_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return vehicle_service.get_vehicle_or_404(db, vehicle_id)


@router.post("/vehicles", response_model=VehicleOut, status_code=status.HTTP_201_CREATED,
             summary="Register a vehicle (starts pending)")
async def create_vehicle(
    body: VehicleCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    generator: ContentGenerator = Depends(get_content_generator),
):
    """A description is generated when none is sent."""
    return await inventory_service.create_vehicle(db, body, actor, generator)


@router.put("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Edit a vehicle (admin)")
async def update_vehicle(vehicle_id: str, body: VehicleUpdate, db: Session = Depends(get_db),
                         actor: Actor = Depends(get_current_actor)):
    return await inventory_service.update_vehicle(db, vehicle_id, body, actor)


@router.delete("/vehicles/{vehicle_id}", summary="Remove a vehicle (admin)")
async def delete_vehicle(vehicle_id: str, db: Session = Depends(get_db),
                         actor: Actor = Depends(get_current_actor)):
    await inventory_service.delete_vehicle(db, vehicle_id, actor)
    return {"status": "removed", "id": vehicle_id}


@router.get("/vehicles/{vehicle_id}/history", response_model=list[AuditLogOut], summary="Audit trail of a vehicle")
def vehicle_history(vehicle_id: str, db: Session = Depends(get_db),
                    actor: Actor = Depends(get_current_actor)):
    vehicle_service.get_vehicle_or_404(db, vehicle_id)
    return inventory_service.vehicle_history(db, vehicle_id)
