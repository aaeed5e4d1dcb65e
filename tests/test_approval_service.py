"""Approval state machine tests against in-memory SQLite."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import patch
from app.exceptions import InvalidTransitionError, NotFoundError, PermissionDeniedError, TransitionConflictError
from app.models.audit_log import AuditLog
from app.models.vehicle import ApprovalStatus
from app.schemas.actor import Actor, ActorRole
from app.services.approval_service import (
    ApprovalAction,
    approve_vehicle,
    next_status,
    reject_vehicle,
    request_reapproval,
)

ADMIN = Actor(id="admin-1", role=ActorRole.ADMIN)
OWNER = Actor(id="seller-1")
STRANGER = Actor(id="seller-2")


class TestNextStatus:
    @pytest.mark.parametrize("action, current, expected", [
        (ApprovalAction.APPROVE, ApprovalStatus.PENDING, ApprovalStatus.APPROVED),
        (ApprovalAction.APPROVE, ApprovalStatus.APPROVED, ApprovalStatus.APPROVED),
        (ApprovalAction.REJECT, ApprovalStatus.PENDING, ApprovalStatus.REJECTED),
        (ApprovalAction.REJECT, ApprovalStatus.REJECTED, ApprovalStatus.REJECTED),
        (ApprovalAction.REQUEST_REAPPROVAL, ApprovalStatus.APPROVED, ApprovalStatus.PENDING),
        (ApprovalAction.REQUEST_REAPPROVAL, ApprovalStatus.REJECTED, ApprovalStatus.PENDING),
        (ApprovalAction.REQUEST_REAPPROVAL, ApprovalStatus.PENDING, ApprovalStatus.PENDING),
    ])
    def test_allowed(self, action, current, expected):
        assert next_status(action, current) == expected

    @pytest.mark.parametrize("action, current", [
        (ApprovalAction.APPROVE, ApprovalStatus.REJECTED),
        (ApprovalAction.REJECT, ApprovalStatus.APPROVED),
    ])
    def test_refused(self, action, current):
        with pytest.raises(InvalidTransitionError):
            next_status(action, current)


class TestApprovalService:
    @pytest.mark.asyncio
    async def test_admin_approves_pending(self, db, make_vehicle):
        vehicle = make_vehicle(ApprovalStatus.PENDING)

        result = await approve_vehicle(db, vehicle.id, ADMIN)

        assert result.approval_status == ApprovalStatus.APPROVED
        assert result.approved_by == "admin-1"
        assert result.approved_at is not None

    @pytest.mark.asyncio
    async def test_admin_rejects_pending(self, db, make_vehicle):
        vehicle = make_vehicle(ApprovalStatus.PENDING)
        result = await reject_vehicle(db, vehicle.id, ADMIN)
        assert result.approval_status == ApprovalStatus.REJECTED
        assert result.approved_by == "admin-1"

    @pytest.mark.asyncio
    async def test_repeated_approve_stays_consistent(self, db, make_vehicle):
        vehicle = make_vehicle(ApprovalStatus.PENDING)
        await approve_vehicle(db, vehicle.id, ADMIN)
        result = await approve_vehicle(db, vehicle.id, ADMIN)
        assert result.approval_status == ApprovalStatus.APPROVED
        assert result.approved_by == "admin-1"
        assert result.approved_at is not None

    @pytest.mark.asyncio
    async def test_non_admin_cannot_approve(self, db, make_vehicle):
        vehicle = make_vehicle(ApprovalStatus.PENDING, created_by=OWNER.id)
        with pytest.raises(PermissionDeniedError):
            await approve_vehicle(db, vehicle.id, OWNER)
        db.refresh(vehicle)
        assert vehicle.approval_status == ApprovalStatus.PENDING

    @pytest.mark.asyncio
    async def test_unknown_vehicle(self, db):
        with pytest.raises(NotFoundError):
            await approve_vehicle(db, "does-not-exist", ADMIN)

    @pytest.mark.asyncio
    async def test_non_admin_gets_403_before_404(self, db):
        with pytest.raises(PermissionDeniedError):
            await reject_vehicle(db, "does-not-exist", STRANGER)

    @pytest.mark.asyncio
    async def test_approved_to_rejected_needs_reapproval(self, db, make_vehicle):
        vehicle = make_vehicle(ApprovalStatus.APPROVED)
        with pytest.raises(InvalidTransitionError):
            await reject_vehicle(db, vehicle.id, ADMIN)

        await request_reapproval(db, vehicle.id, ADMIN)
        result = await reject_vehicle(db, vehicle.id, ADMIN)
        assert result.approval_status == ApprovalStatus.REJECTED

    @pytest.mark.asyncio
    async def test_owner_requests_reapproval(self, db, make_vehicle):
        vehicle = make_vehicle(ApprovalStatus.REJECTED, created_by=OWNER.id)
        vehicle.approved_by = "admin-1"
        db.commit()

        result = await request_reapproval(db, vehicle.id, OWNER)

        assert result.approval_status == ApprovalStatus.PENDING
        assert result.approved_by is None
        assert result.approved_at is None

    @pytest.mark.asyncio
    async def test_stranger_cannot_request_reapproval(self, db, make_vehicle):
        vehicle = make_vehicle(ApprovalStatus.APPROVED, created_by=OWNER.id)

        with pytest.raises(PermissionDeniedError):
            await request_reapproval(db, vehicle.id, STRANGER)

        db.refresh(vehicle)
        assert vehicle.approval_status == ApprovalStatus.APPROVED
        assert db.query(AuditLog).count() == 0

    @pytest.mark.asyncio
    async def test_transition_is_audited(self, db, make_vehicle):
        vehicle = make_vehicle(ApprovalStatus.PENDING)
        await approve_vehicle(db, vehicle.id, ADMIN)

        rows = db.query(AuditLog).filter(AuditLog.resource_id == vehicle.id).all()
        assert len(rows) == 1
        assert rows[0].action == "APPROVE"
        assert rows[0].actor_id == "admin-1"
        assert rows[0].details["before"] == "pending"
        assert rows[0].details["after"] == "approved"

    @pytest.mark.asyncio
    async def test_lost_race_raises_conflict(self, db, make_vehicle):
        vehicle = make_vehicle(ApprovalStatus.PENDING)

        with patch("app.services.approval_service.vehicle_service.update_approval", return_value=False):
            with pytest.raises(TransitionConflictError):
                await approve_vehicle(db, vehicle.id, ADMIN)

        db.refresh(vehicle)
        assert vehicle.approval_status == ApprovalStatus.PENDING
        assert db.query(AuditLog).count() == 0
