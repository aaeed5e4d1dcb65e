# app/routers/approvals.py
"""Approval workflow endpoints: approve, reject, request re-approval."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.schemas.vehicle import VehicleOut
from app.services import approval_service

router = APIRouter()


@router.post("/vehicles/{vehicle_id}/approve", response_model=VehicleOut, summary="Approve a vehicle (admin)")
async def approve_vehicle(vehicle_id: str, db: Session = Depends(get_db),
                          actor: Actor = Depends(get_current_actor)):
    return await approval_service.approve_vehicle(db, vehicle_id, actor)


@router.post("/vehicles/{vehicle_id}/reject", response_model=VehicleOut, summary="Reject a vehicle (admin)")
async def reject_vehicle(vehicle_id: str, db: Session = Depends(get_db),
                         actor: Actor = Depends(get_current_actor)):
    return await approval_service.reject_vehicle(db, vehicle_id, actor)


@router.post("/vehicles/{vehicle_id}/request-approval", response_model=VehicleOut,
             summary="Send a vehicle back to pending (creator or admin)")
async def request_reapproval(vehicle_id: str, db: Session = Depends(get_db),
                             actor: Actor = Depends(get_current_actor)):
    return await approval_service.request_reapproval(db, vehicle_id, actor)
