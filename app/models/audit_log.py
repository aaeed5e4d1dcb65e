# app/models/audit_log.py
"""
Append-only audit log table.
One row per approval transition, per vehicle create/update/delete, and per
content generation attempt. Written only through audit_service.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from app.database import Base
from app.models.vehicle import ACTOR_ID_LENGTH


class AuditLog(Base):
    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String(100), nullable=False, index=True)
    resource_type = Column(String(50), nullable=False)
    resource_id = Column(String(36), index=True)   # Null for previews of unsaved vehicles
    actor_id = Column(String(ACTOR_ID_LENGTH), index=True)
    details = Column(JSON)
    created_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog {self.id} action={self.action} resource={self.resource_id}>"
