# app/services/audit_service.py
"""
Shared audit log writer.
Used by approval_service, inventory_service and content_service.
Rows are append-only; nothing in the application updates or deletes them.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import PersistenceError
from app.models.audit_log import AuditLog
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def record_audit(db: Session, action: str, resource_id: Optional[str], actor_id: Optional[str],
                       details: Optional[dict] = None, resource_type: str = "vehicle"):
    """Persist an audit row. Commits immediately, together with any pending changes in the session."""
    try:
        db.add(AuditLog(action=action, resource_type=resource_type, resource_id=resource_id,
                        actor_id=actor_id, details=details or {}, created_at=datetime.utcnow()))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[AUDIT] Failed to record {action} for {resource_id}: {e}")
        raise PersistenceError("Failed to write audit log") from e
    logger.info(f"[AUDIT][{action}] {resource_type}={resource_id} actor={actor_id} {details or ''}")


def list_history(db: Session, resource_id: str, limit: int = 100) -> list[AuditLog]:
    """Audit rows for one resource, newest first."""
    try:
        return (
            db.query(AuditLog)
            .filter(AuditLog.resource_id == resource_id)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as e:
        raise PersistenceError("Failed to load vehicle history") from e
