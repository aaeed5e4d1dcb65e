# app/services/approval_service.py
"""
Approval workflow for vehicle listings.

    pending ──approve──▶ approved
    pending ──reject───▶ rejected
    approved / rejected / pending ──request_reapproval──▶ pending

approve / reject are admin-only and may be repeated on a vehicle already in
the target state (the stamp is refreshed). Moving straight between approved
and rejected is refused: the listing has to go back to pending first.
request_reapproval is open to the vehicle's creator and to admins.

Each transition writes approval_status, approved_by and approved_at in one
conditional UPDATE (WHERE approval_status = <status read>) and appends one
audit row with the before/after status. If another request moved the status
in between, TransitionConflictError is raised and nothing is written.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from sqlalchemy.orm import Session

from app.exceptions import InvalidTransitionError, PermissionDeniedError, TransitionConflictError
from app.models.vehicle import ApprovalStatus, Vehicle
from app.schemas.actor import Actor
from app.services import vehicle_service
from app.services.audit_service import record_audit
from app.utils.logger import get_logger

logger = get_logger(__name__)


class ApprovalAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_REAPPROVAL = "request_reapproval"


@dataclass(frozen=True)
class Transition:
    sources: frozenset
    target: ApprovalStatus
    owner_allowed: bool
    audit_action: str


TRANSITIONS = {
    ApprovalAction.APPROVE: Transition(
        sources=frozenset({ApprovalStatus.PENDING, ApprovalStatus.APPROVED}),
        target=ApprovalStatus.APPROVED,
        owner_allowed=False,
        audit_action="APPROVE",
    ),
    ApprovalAction.REJECT: Transition(
        sources=frozenset({ApprovalStatus.PENDING, ApprovalStatus.REJECTED}),
        target=ApprovalStatus.REJECTED,
        owner_allowed=False,
        audit_action="REJECT",
    ),
    ApprovalAction.REQUEST_REAPPROVAL: Transition(
        sources=frozenset(ApprovalStatus),
        target=ApprovalStatus.PENDING,
        owner_allowed=True,
        audit_action="REQUEST_APPROVAL",
    ),
}


def check_permission(action: ApprovalAction, vehicle: Vehicle, actor: Actor):
    if actor.is_admin:
        return
    if TRANSITIONS[action].owner_allowed and vehicle.created_by == actor.id:
        return
    if TRANSITIONS[action].owner_allowed:
        raise PermissionDeniedError("Only the vehicle's creator or an admin can request re-approval")
    raise PermissionDeniedError(f"Only admins can {action.value} vehicles")


def next_status(action: ApprovalAction, current: ApprovalStatus) -> ApprovalStatus:
    transition = TRANSITIONS[action]
    if current not in transition.sources:
        raise InvalidTransitionError(
            f"Cannot {action.value} a vehicle that is {current.value}; request re-approval first"
        )
    return transition.target


async def apply_transition(db: Session, vehicle_id: str, action: ApprovalAction, actor: Actor) -> Vehicle:
    # Admin-only actions are refused before the lookup so unknown ids are not revealed
    if not TRANSITIONS[action].owner_allowed and not actor.is_admin:
        raise PermissionDeniedError(f"Only admins can {action.value} vehicles")

    vehicle = vehicle_service.get_vehicle_or_404(db, vehicle_id)
    check_permission(action, vehicle, actor)

    before = ApprovalStatus(vehicle.approval_status)
    target = next_status(action, before)

    if target == ApprovalStatus.PENDING:
        approved_by, approved_at = None, None
    else:
        approved_by, approved_at = actor.id, datetime.utcnow()

    if not vehicle_service.update_approval(db, vehicle_id, before, target, approved_by, approved_at):
        db.rollback()
        logger.warning(f"[APPROVAL] {action.value} on {vehicle_id} lost a race (expected {before.value})")
        raise TransitionConflictError(f"Vehicle {vehicle_id} changed approval status concurrently; retry")

    await record_audit(
        db,
        action=TRANSITIONS[action].audit_action,
        resource_id=vehicle_id,
        actor_id=actor.id,
        details={"before": before.value, "after": target.value,
                 "make": vehicle.make, "model": vehicle.model},
    )
    db.refresh(vehicle)
    logger.info(f"[APPROVAL] {vehicle_id}: {before.value} → {target.value} by {actor.id}")
    return vehicle


async def approve_vehicle(db: Session, vehicle_id: str, actor: Actor) -> Vehicle:
    return await apply_transition(db, vehicle_id, ApprovalAction.APPROVE, actor)


async def reject_vehicle(db: Session, vehicle_id: str, actor: Actor) -> Vehicle:
    return await apply_transition(db, vehicle_id, ApprovalAction.REJECT, actor)


async def request_reapproval(db: Session, vehicle_id: str, actor: Actor) -> Vehicle:
    return await apply_transition(db, vehicle_id, ApprovalAction.REQUEST_REAPPROVAL, actor)
